import os
import webbrowser
from threading import Timer

from playlist_engine.app import create_app

app = create_app()


def open_browser():
    """Opens the API status page after a 1.5s delay to allow the server to start."""
    webbrowser.open_new("http://127.0.0.1:5000/api/status")


if __name__ == '__main__':
    print('Starting AI Playlist Engine...')

    if not os.environ.get('NO_BROWSER'):
        # 1. Schedule the browser to open in 1.5 seconds
        Timer(1.5, open_browser).start()

    # 2. Start the server (This blocks execution until you press Ctrl+C)
    app.run(host='127.0.0.1', port=5000, debug=os.environ.get('FLASK_DEBUG') == '1')

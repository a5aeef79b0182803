"""
AI Client - produces the raw song list for a playlist.

OpenAI → Responses API with Structured Outputs (JSON Schema via text.format).

The model's values for bpm/duration are treated as hints only; the generator
repairs them afterwards, so the schema lets them be null.
"""

import json
import logging
import re

from openai import OpenAI

log = logging.getLogger(__name__)

OPENAI_MODELS = [
    {
        'id': 'gpt-5-mini',
        'name': 'GPT-5 Mini',
        'description': 'Fast, cost-efficient version'
    },
    {
        'id': 'gpt-5-nano',
        'name': 'GPT-5 Nano',
        'description': 'Fastest & cheapest variant'
    },
    {
        'id': 'gpt-5.2',
        'name': 'GPT-5.2',
        'description': 'Flagship model, expensive'
    },
]

_NULLABLE_STRING = {"type": ["string", "null"]}
_NULLABLE_NUMBER = {"type": ["number", "null"]}

SCHEMA_SONG_LIST = {
    "type": "json_schema",
    "name": "song_list",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "songs": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string"},
                        "artist": {"type": "string"},
                        "album": _NULLABLE_STRING,
                        "year": {"type": ["integer", "null"]},
                        "bpm": _NULLABLE_NUMBER,
                        "duration": _NULLABLE_NUMBER,
                        "genre": _NULLABLE_STRING,
                    },
                    "required": ["title", "artist", "album", "year",
                                 "bpm", "duration", "genre"],
                    "additionalProperties": False
                }
            }
        },
        "required": ["songs"],
        "additionalProperties": False
    }
}


class AIClientError(Exception):
    """Raised when the model returns something we cannot use."""


class AIClient:
    def __init__(self, openai_api_key=None, client=None):
        # client lets callers hand in a preconfigured OpenAI instance
        self.openai_client = client or (OpenAI(api_key=openai_api_key) if openai_api_key else None)
        # OpenAI safety / cost caps (0 = unlimited)
        self.max_output_tokens = 0
        self.reasoning_effort = 'low'
        self._last_usage = None

    def update_safety_settings(self, max_output_tokens=0, reasoning_effort='low'):
        """Update OpenAI cost/safety caps at runtime."""
        self.max_output_tokens = max_output_tokens or 0
        self.reasoning_effort = reasoning_effort or 'low'

    def verify_keys(self):
        """Test the configured API key and return status."""
        status = {'configured': bool(self.openai_client), 'verified': False, 'error': None}
        if self.openai_client:
            try:
                self.openai_client.models.list()
                status['verified'] = True
            except Exception as e:
                status['error'] = str(e)[:120]
        return status

    def _call_openai_responses(self, instructions, user_input, model, schema=None):
        """Call OpenAI Responses API and return the parsed JSON dict."""
        if not self.openai_client:
            raise AIClientError('OpenAI is not configured')

        kwargs = {
            "model": model,
            "instructions": instructions,
            "input": user_input,
            "truncation": "auto",
        }
        if schema:
            kwargs["text"] = {"format": schema}
        if self.reasoning_effort:
            kwargs["reasoning"] = {"effort": self.reasoning_effort}
        if self.max_output_tokens and self.max_output_tokens > 0:
            kwargs["max_output_tokens"] = self.max_output_tokens

        response = self.openai_client.responses.create(**kwargs)

        if getattr(response, 'usage', None):
            self._last_usage = {
                'input_tokens': getattr(response.usage, 'input_tokens', 0),
                'output_tokens': getattr(response.usage, 'output_tokens', 0),
                'total_tokens': getattr(response.usage, 'total_tokens', 0),
            }
            log.info(f'Token usage: in={self._last_usage["input_tokens"]}, '
                     f'out={self._last_usage["output_tokens"]}, '
                     f'total={self._last_usage["total_tokens"]}')

        content = response.output_text or ''
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            # Try to extract JSON from mixed text
            json_match = re.search(r'\{[\s\S]*\}', content)
            if json_match:
                try:
                    return json.loads(json_match.group())
                except json.JSONDecodeError:
                    pass
        raise AIClientError('AI returned invalid JSON. Please try again.')

    def generate_songs(self, prompt, instructions, count=20, model='gpt-5-mini'):
        """Ask the model for a song list. Returns a list of raw song dicts."""
        user_msg = f'Create a playlist with exactly {count} songs: {prompt}'
        result = self._call_openai_responses(instructions, user_msg, model,
                                             schema=SCHEMA_SONG_LIST)
        songs = result.get('songs') if isinstance(result, dict) else result
        if not isinstance(songs, list):
            raise AIClientError('AI response did not contain a song list')
        log.info(f'Model returned {len(songs)} songs for "{prompt[:60]}"')
        return [s for s in songs if isinstance(s, dict)]

"""Incremental extraction of the first fenced code block from a text stream."""

import re

from utils.tag_filter import held_suffix_length

FENCE = "```"

# A language word counts only when whitespace follows it
_HEADER_RE = re.compile(r"(\w+)(?=[ \t\r\n])[ \t\r\n]*|[ \t\r\n]*")
# Header text that the next chunk could still turn into a tag
_PENDING_RE = re.compile(r"\w*[ \t\r\n]*")


class FenceExtractor:
    """Streams the content of the first ``` block as it arrives.

    Text before the opening marker and after the closing marker is dropped.
    An unterminated block is treated as complete when the stream ends.
    """

    def __init__(self):
        self.phase = "seeking_open"     # seeking_open | in_block | complete
        self.lookback = ""
        self.language = None

    def is_complete(self):
        return self.phase == "complete"

    def feed(self, chunk):
        if not chunk or self.phase == "complete":
            return []

        self.lookback += chunk

        if self.phase == "seeking_open" and not self._open_block():
            return []

        return self._drain()

    def _open_block(self):
        """Try to consume the opening marker and header. True once in the block."""
        start = self.lookback.find(FENCE)
        if start == -1:
            # Only a partial marker can matter for the next chunk
            self.lookback = self.lookback[-(len(FENCE) - 1):]
            return False

        header = self.lookback[start + len(FENCE):]
        if _PENDING_RE.fullmatch(header):
            # The tag or its trailing whitespace may continue in the next chunk
            self.lookback = self.lookback[start:]
            return False

        self._enter_block(header)
        return True

    def _enter_block(self, header):
        match = _HEADER_RE.match(header)
        self.language = match.group(1) or None
        self.lookback = header[match.end():]
        self.phase = "in_block"

    def _drain(self):
        end = self.lookback.find(FENCE)
        if end != -1:
            content = self.lookback[:end]
            self.lookback = ""
            self.phase = "complete"
            return [content] if content else []

        held = held_suffix_length(self.lookback, FENCE)
        content = self.lookback[:len(self.lookback) - held]
        self.lookback = self.lookback[len(self.lookback) - held:]
        return [content] if content else []

    def finalize(self):
        if self.phase == "seeking_open" and self.lookback.startswith(FENCE):
            # Stream ended while the header was still undecided
            self._enter_block(self.lookback[len(FENCE):])
        if self.phase != "in_block":
            return []
        rest = self.lookback
        self.lookback = ""
        self.phase = "complete"
        return [rest] if rest else []

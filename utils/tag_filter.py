"""Incremental removal of <think>...</think> reasoning spans from a token stream."""

from config.defaults import DEFAULTS


def held_suffix_length(text, token):
    """Length of the longest tail of text that is a proper prefix of token.

    This is the part of a chunk that might turn into token once the next
    chunk arrives, so it must not be emitted yet. Never exceeds len(token) - 1.
    """
    for size in range(min(len(text), len(token) - 1), 0, -1):
        if text.endswith(token[:size]):
            return size
    return 0


class TagFilter:
    """Strips reasoning spans across arbitrary chunk boundaries.

    Usage:
        f = TagFilter()
        out = f.feed("Hi <thi") + f.feed("nk>hidden</think> there") + f.finalize()
        "".join(out) == "Hi  there"
    """

    def __init__(self, open_tag=None, close_tag=None):
        self.open_tag = open_tag or DEFAULTS["reasoning_open_tag"]
        self.close_tag = close_tag or DEFAULTS["reasoning_close_tag"]
        self.in_span = False
        self.lookback = ""

    def feed(self, chunk):
        """Return the clean fragments that can be released after this chunk."""
        if not chunk:
            return []

        text = self.lookback + chunk
        self.lookback = ""
        out = []

        while text:
            if self.in_span:
                end = text.find(self.close_tag)
                if end == -1:
                    # Keep just enough to recognise a closing tag split across chunks
                    keep = len(self.close_tag) - 1
                    self.lookback = text[-keep:] if keep else ""
                    break
                text = text[end + len(self.close_tag):]
                self.in_span = False
            else:
                start = text.find(self.open_tag)
                if start != -1:
                    if start > 0:
                        out.append(text[:start])
                    text = text[start + len(self.open_tag):]
                    self.in_span = True
                    continue
                held = held_suffix_length(text, self.open_tag)
                safe = text[:len(text) - held]
                self.lookback = text[len(text) - held:]
                if safe:
                    out.append(safe)
                break

        return out

    def finalize(self):
        """Flush a withheld tail; an unterminated span is dropped."""
        tail = self.lookback
        self.lookback = ""
        if self.in_span or not tail:
            return []
        return [tail]

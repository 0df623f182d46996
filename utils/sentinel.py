"""Detection of the "no change" sentinel at the start of a stage's output."""

from config.defaults import DEFAULTS


class SentinelMatcher:
    """Holds back output while it could still be the sentinel.

    feed() returns the fragments that are safe to pass on. Once the held text
    (ignoring surrounding whitespace) equals the sentinel, `matched` turns true
    and nothing is released. Once it stops being a prefix of the sentinel the
    held text is released in one piece and every later fragment passes
    through unchanged.
    """

    def __init__(self, sentinel=None):
        self.sentinel = (sentinel or DEFAULTS["sentinel"]).strip()
        self.state = "matching"     # matching | matched | diverged
        self.held = ""

    @property
    def matched(self):
        return self.state == "matched"

    def feed(self, fragment):
        if not fragment or self.state == "matched":
            return []
        if self.state == "diverged":
            return [fragment]

        self.held += fragment
        candidate = self.held.strip()
        if self.sentinel.startswith(candidate):
            if candidate == self.sentinel:
                self.state = "matched"
                self.held = ""
            return []

        self.state = "diverged"
        released = self.held
        self.held = ""
        return [released]

    def finalize(self):
        """Release anything still held when the stream ends short of the sentinel."""
        if self.state != "matching" or not self.held:
            return []
        released = self.held
        self.held = ""
        self.state = "diverged"
        return [released]

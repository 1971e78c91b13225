from marks_core import ClipboardUnavailable


class FakeClipboard:
    def __init__(self, contents: str = "", fail: bool = False):
        self.contents = contents
        self.fail = fail
        self.writes = 0

    def get(self) -> str:
        if self.fail:
            raise ClipboardUnavailable("Unable to get clipboard contents: no backend")
        return self.contents

    def set(self, text: str) -> None:
        if self.fail:
            raise ClipboardUnavailable("Unable to set clipboard contents: no backend")
        self.contents = text
        self.writes += 1

import base64

from medlist.services.errors import UpstreamError

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")


class FakeVisionClient:
    name = "fake"

    def __init__(self, reply='{"medications": []}', error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, payload, prompt):
        self.calls.append((payload, prompt))
        if self.error:
            raise UpstreamError(self.error)
        return self.reply

    async def aclose(self):
        pass

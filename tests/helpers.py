import threading
import time

from requests import Response
from requests.adapters import BaseAdapter

from client.dispatcher import DispatchResult


class FakeAdapter(BaseAdapter):
    """
    Transport adapter that never touches the network.
    responder(call_no, request) returns a status code or an exception to raise.
    """
    def __init__(self, responder):
        super().__init__()
        self.responder = responder
        self.calls = 0
        self.requests = []
        self.lock = threading.Lock()

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        with self.lock:
            self.calls += 1
            n = self.calls
            self.requests.append(request)
        outcome = self.responder(n, request)
        if isinstance(outcome, Exception):
            raise outcome
        resp = Response()
        resp.status_code = outcome
        resp._content = b'{"status": "ok"}'
        resp.request = request
        resp.url = request.url
        return resp

    def close(self):
        pass


def mount(dispatcher, responder):
    adapter = FakeAdapter(responder)
    dispatcher.session.mount("http://", adapter)
    dispatcher.session.mount("https://", adapter)
    return adapter


class StubDispatcher:
    """Dispatcher stand-in: fails every `fail_every`-th send (0 = never)."""
    def __init__(self, fail_every=0):
        self.fail_every = fail_every
        self.calls = 0
        self.events = []
        self.lock = threading.Lock()

    def send(self, event):
        with self.lock:
            self.calls += 1
            n = self.calls
            self.events.append(event)
        ok = not (self.fail_every and n % self.fail_every == 0)
        return DispatchResult(ok, 1, 200 if ok else 500)


class SlowDispatcher(StubDispatcher):
    """Holds each send for `delay` seconds and records the peak number in flight."""
    def __init__(self, delay=0.05):
        super().__init__()
        self.delay = delay
        self.in_flight = 0
        self.peak = 0

    def send(self, event):
        with self.lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            time.sleep(self.delay)
            return super().send(event)
        finally:
            with self.lock:
                self.in_flight -= 1

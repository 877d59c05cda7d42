from typing import List, Optional
import logging
import threading
import time

from web3 import HTTPProvider


logger = logging.getLogger(__name__)

# Calls that change chain state. Re-sending them to another endpoint would be a
# retry, so a failure here always goes straight back to the caller.
SEND_METHODS = frozenset({"eth_sendRawTransaction", "eth_sendTransaction"})

RATE_LIMIT_TOKENS = (
    "rate limit", "too many requests", "daily request count exceeded",
    "request limit", "over capacity", "project id request rate exceeded",
)


class RotatingHTTPProvider(HTTPProvider):
    """
    HTTP provider over several RPC URLs. Read calls move on to the next URL when
    the current one is rate-limited or unreachable; transaction sends never do.
    """

    def __init__(self, rpc_urls: List[str], request_kwargs: Optional[dict] = None, backoff: float = 0.1):
        urls = list(dict.fromkeys([u.strip() for u in rpc_urls or [] if u and u.strip()]))
        if not urls:
            raise ValueError("rpc_urls must contain at least one URL")
        # web3's own exception retry would re-send transactions; rotation below replaces it
        super().__init__(endpoint_uri=urls[0], request_kwargs=request_kwargs, exception_retry_configuration=None)
        self._urls: List[str] = urls
        self._idx: int = 0
        self._lock = threading.Lock()
        self.backoff = backoff

    @property
    def urls(self) -> List[str]:
        return list(self._urls)

    @property
    def current_url(self) -> str:
        with self._lock:
            return self._urls[self._idx]

    def _advance(self) -> None:
        with self._lock:
            self._idx = (self._idx + 1) % len(self._urls)
            self.endpoint_uri = self._urls[self._idx]

    @staticmethod
    def _is_rate_limited(error_obj) -> bool:
        if not isinstance(error_obj, dict):
            return False
        msg = str(error_obj.get("message", "")).lower()
        if any(tok in msg for tok in RATE_LIMIT_TOKENS):
            return True
        return error_obj.get("code") in (-32005, 429)

    def make_request(self, method, params):  # type: ignore[override]
        if method in SEND_METHODS:
            return super().make_request(method, params)

        last_exc: Optional[BaseException] = None
        last_error_resp: Optional[dict] = None
        for _ in range(len(self._urls)):
            url = self.current_url
            try:
                response = super().make_request(method, params)
            except Exception as e:  # connection errors, timeouts
                logger.warning("RPC %s failed on %s: %s", method, url, e)
                last_exc = e
            else:
                if not (isinstance(response, dict) and self._is_rate_limited(response.get("error"))):
                    return response
                logger.warning("RPC %s rate limited on %s", method, url)
                last_error_resp = response
            self._advance()
            time.sleep(self.backoff)

        if last_exc is not None and last_error_resp is None:
            raise last_exc
        return last_error_resp

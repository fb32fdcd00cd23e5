"""
geeknews/translator.py
----------------------
Single-shot translation clients for the free / cheap HTTP backends.

Every client makes exactly ONE request per `translate()` call and either
returns the translated text verbatim or raises a `TranslationError`
subclass. Retrying and falling back are the pipeline's job.

Backends:
  - mymemory     : api.mymemory.translated.net (no key, ~500 chars per request)
  - google-web   : unofficial translate.googleapis.com endpoint (no key)
  - google-cloud : Cloud Translation v2 REST (GOOGLE_API_KEY)
"""

from abc import ABC, abstractmethod

import requests

import config


# ── Error taxonomy ────────────────────────────────────────────────────────────

class TranslationError(Exception):
    """Base class for a failed translation request."""


class RateLimited(TranslationError):
    """The backend refused the request because a quota or rate window is exhausted."""


class RequestTimeout(TranslationError):
    """No response within the request timeout."""


class BackendError(TranslationError):
    """Transport failure, HTTP error status or an explicit error in the body."""


class MalformedResponse(TranslationError):
    """The body could not be parsed or lacks the translated text."""


# ── Base client ───────────────────────────────────────────────────────────────

class BaseTranslator(ABC):
    """Shared HTTP plumbing: one request, mapped onto the error taxonomy."""

    name = "base"

    def __init__(self, session: requests.Session | None = None,
                 timeout: float = config.REQUEST_TIMEOUT):
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = config.USER_AGENT
        self.session = session
        self.timeout = timeout

    @abstractmethod
    def translate(self, text: str, source_lang: str = config.SOURCE_LANG,
                  target_lang: str = config.TARGET_LANG) -> str:
        """Return the translation of *text* or raise a `TranslationError`."""

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as exc:
            raise RequestTimeout(f"{self.name}: no response after {self.timeout:g}s") from exc
        except requests.RequestException as exc:
            raise BackendError(f"{self.name}: {exc}") from exc

        if resp.status_code == 429:
            raise RateLimited(f"{self.name}: HTTP 429")
        return resp

    def _json(self, resp: requests.Response):
        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponse(f"{self.name}: response is not JSON") from exc

    def _raise_for_status(self, resp: requests.Response) -> None:
        if resp.status_code >= 400:
            raise BackendError(f"{self.name}: HTTP {resp.status_code}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(timeout={self.timeout:g})"


# ── MyMemory (free) ───────────────────────────────────────────────────────────

class MyMemoryTranslator(BaseTranslator):
    """Translates via the MyMemory REST API (no API key required)."""

    name = "mymemory"
    URL  = "https://api.mymemory.translated.net/get"

    def __init__(self, email: str = config.MYMEMORY_EMAIL, **kwargs):
        super().__init__(**kwargs)
        self.email = email

    def translate(self, text: str, source_lang: str = config.SOURCE_LANG,
                  target_lang: str = config.TARGET_LANG) -> str:
        params = {"q": text, "langpair": f"{source_lang}|{target_lang}"}
        if self.email:
            params["de"] = self.email   # registered address raises the daily quota

        resp = self._request("GET", self.URL, params=params)
        self._raise_for_status(resp)
        data = self._json(resp)
        if not isinstance(data, dict):
            raise MalformedResponse(f"{self.name}: unexpected body {type(data).__name__}")

        # responseStatus is an int on success and sometimes a string on errors
        status = str(data.get("responseStatus", ""))
        details = data.get("responseDetails") or ""
        if status == "429":
            raise RateLimited(f"{self.name}: {details or 'request limit exceeded'}")
        if status != "200":
            raise BackendError(f"{self.name}: {details or f'status {status}'}")

        translated = (data.get("responseData") or {}).get("translatedText")
        if not isinstance(translated, str) or not translated:
            raise MalformedResponse(f"{self.name}: no translatedText in response")
        if "INVALID LANGUAGE PAIR" in translated.upper():
            raise BackendError(f"{self.name}: {translated}")
        return translated


# ── Google Translate web endpoint (unofficial) ────────────────────────────────

class GoogleWebTranslator(BaseTranslator):
    """Translates via the keyless endpoint used by the Google Translate web widget."""

    name = "google-web"
    URL  = "https://translate.googleapis.com/translate_a/single"

    def translate(self, text: str, source_lang: str = config.SOURCE_LANG,
                  target_lang: str = config.TARGET_LANG) -> str:
        params = {"client": "gtx", "sl": source_lang, "tl": target_lang, "dt": "t", "q": text}
        resp = self._request("GET", self.URL, params=params)
        self._raise_for_status(resp)
        data = self._json(resp)

        # [[["translated", "original", ...], ...], ...]
        try:
            segments = data[0]
            translated = "".join(seg[0] for seg in segments if seg and seg[0])
        except (TypeError, IndexError, KeyError) as exc:
            raise MalformedResponse(f"{self.name}: unexpected response shape") from exc
        if not translated:
            raise MalformedResponse(f"{self.name}: empty translation")
        return translated


# ── Google Cloud Translation REST API ─────────────────────────────────────────

class GoogleCloudTranslator(BaseTranslator):
    """Translates via Cloud Translation v2 using an API key."""

    name = "google-cloud"
    URL  = "https://translation.googleapis.com/language/translate/v2"

    def __init__(self, api_key: str = config.GOOGLE_API_KEY, **kwargs):
        if not api_key:
            raise ValueError("google-cloud backend needs GOOGLE_API_KEY")
        super().__init__(**kwargs)
        self.api_key = api_key

    def translate(self, text: str, source_lang: str = config.SOURCE_LANG,
                  target_lang: str = config.TARGET_LANG) -> str:
        params = {
            "q":      text,
            "source": source_lang,
            "target": target_lang,
            "key":    self.api_key,
            "format": "text",
        }
        resp = self._request("POST", self.URL, params=params)
        try:
            data = resp.json()
        except ValueError:
            data = None

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            if self._is_quota_error(error):
                raise RateLimited(f"{self.name}: {error.get('message', 'quota exceeded')}")
            raise BackendError(f"{self.name}: {error.get('message', 'error')}")
        self._raise_for_status(resp)
        if data is None:
            raise MalformedResponse(f"{self.name}: response is not JSON")

        try:
            translated = data["data"]["translations"][0]["translatedText"]
        except (TypeError, IndexError, KeyError) as exc:
            raise MalformedResponse(f"{self.name}: no translatedText in response") from exc
        if not isinstance(translated, str) or not translated:
            raise MalformedResponse(f"{self.name}: empty translation")
        return translated

    @staticmethod
    def _is_quota_error(error: dict) -> bool:
        # v2 reports throttling as 403 with reasons like userRateLimitExceeded
        if error.get("status") == "RESOURCE_EXHAUSTED" or error.get("code") == 429:
            return True
        reasons = [e.get("reason", "") for e in error.get("errors") or [] if isinstance(e, dict)]
        return any(r.endswith("LimitExceeded") for r in reasons)


# ── Factory ───────────────────────────────────────────────────────────────────

BACKENDS = {
    MyMemoryTranslator.name:    MyMemoryTranslator,
    GoogleWebTranslator.name:   GoogleWebTranslator,
    GoogleCloudTranslator.name: GoogleCloudTranslator,
}


def build_translator(name: str = config.TRANSLATION_BACKEND, **kwargs) -> BaseTranslator:
    """Return the client registered under *name*. Extra kwargs go to its constructor."""
    try:
        backend = BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"unknown translation backend {name!r} (expected one of {', '.join(BACKENDS)})"
        ) from None
    return backend(**kwargs)

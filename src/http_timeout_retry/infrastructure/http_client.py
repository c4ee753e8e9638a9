"""Request builder over requests.Session with opt-in timeout retries.

Usage:
    client = PendingRequest("https://api.example.test", settings=config.retry)
    response = client.with_timeout_retry(attempts=5, allowed_methods=["GET"]).get("/status")

Each ``send`` runs its own pipeline: the request is prepared, every
``before_sending`` hook sees the ``PreparedRequest``, then it is dispatched.
Retries reuse that pipeline, so hooks run once per attempt.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests

from http_timeout_retry.domain.config.retry import RetryConfig
from http_timeout_retry.domain.models.retry_policy import RetryContext, RetryPolicy
from http_timeout_retry.domain.retry.predicates import FailureClassifier, compose_predicate
from http_timeout_retry.domain.retry.resolver import resolve_retry_policy
from http_timeout_retry.infrastructure.config.config_manager import ConfigManager
from http_timeout_retry.infrastructure.retry import execute_with_retry

logger = logging.getLogger(__name__)

RequestHook = Callable[[requests.PreparedRequest], None]

# Keyword arguments consumed by requests.Request
_REQUEST_KWARGS = ("params", "data", "json", "files", "auth", "cookies")
# Keyword arguments consumed by Session.send, plus per-request headers
_SEND_KWARGS = ("headers", "timeout", "allow_redirects", "proxies", "stream", "verify", "cert")


class PendingRequest:
    """Fluent HTTP request builder"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 30.0,
        settings: Optional[RetryConfig] = None,
        config_manager: Optional[ConfigManager] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """Initialize request builder

        Args:
            base_url: Prefix for relative URLs
            session: requests session (a new one if None)
            headers: Default headers sent with every request
            timeout: Request timeout in seconds
            settings: Global retry configuration (default: loaded via ConfigManager)
            config_manager: Configuration source used when settings is None
            sleep: Sleep function used between retries (seconds)
        """
        self.base_url = base_url or ""
        self.session = session or requests.Session()
        self.headers: Dict[str, str] = dict(headers or {})
        self.timeout_seconds = timeout
        self._settings = settings
        self._config_manager = config_manager
        self._sleep = sleep
        self._hooks: List[RequestHook] = []
        self.retry_policy: Optional[RetryPolicy] = None
        self.failure_classifier: Optional[FailureClassifier] = None

    # Builder methods

    def with_headers(self, headers: Dict[str, str]) -> "PendingRequest":
        self.headers.update(headers)
        return self

    def with_token(self, token: str, token_type: str = "Bearer") -> "PendingRequest":
        self.headers["Authorization"] = f"{token_type} {token}".strip()
        return self

    def with_base_url(self, base_url: str) -> "PendingRequest":
        self.base_url = base_url
        return self

    def timeout(self, seconds: float) -> "PendingRequest":
        self.timeout_seconds = seconds
        return self

    def before_sending(self, hook: RequestHook) -> "PendingRequest":
        """Register a hook called with each outgoing PreparedRequest"""
        self._hooks.append(hook)
        return self

    def retry_settings(self) -> RetryConfig:
        """Global retry configuration used by this builder

        Without injected settings the configuration is read again on every
        call, so each ``with_timeout_retry`` sees the current file and
        environment.
        """
        if self._settings is not None:
            return self._settings
        manager = self._config_manager or ConfigManager()
        return manager.get_retry_config()

    def with_timeout_retry(
        self,
        attempts: Optional[int] = None,
        delay: Optional[int] = None,
        failure_classifier: Optional[FailureClassifier] = None,
        logging_enabled: Optional[bool] = None,
        allowed_methods: Optional[Iterable[str]] = None,
    ) -> "PendingRequest":
        """Retry failed requests with a fixed delay

        Does nothing when retries are disabled globally.

        Args:
            attempts: Total attempts (overrides config if set)
            delay: Delay between attempts in milliseconds (overrides config if set)
            failure_classifier: Decides if a failure is retryable
                (default: connection errors and timeouts only)
            logging_enabled: Whether to log retry attempts (overrides config if set)
            allowed_methods: HTTP methods allowed for retry (overrides config if set)

        Returns:
            This builder
        """
        settings = self.retry_settings()
        if not settings.enabled:
            logger.debug("Timeout retries disabled by configuration")
            return self

        self.retry_policy = resolve_retry_policy(
            settings,
            attempts=attempts,
            delay=delay,
            logging_enabled=logging_enabled,
            allowed_methods=allowed_methods,
        )
        self.failure_classifier = failure_classifier
        return self

    # Verbs

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> requests.Response:
        return self.send("GET", url, params=params, **kwargs)

    def head(self, url: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("allow_redirects", False)
        return self.send("HEAD", url, params=params, **kwargs)

    def post(self, url: str, json: Any = None, **kwargs: Any) -> requests.Response:
        return self.send("POST", url, json=json, **kwargs)

    def put(self, url: str, json: Any = None, **kwargs: Any) -> requests.Response:
        return self.send("PUT", url, json=json, **kwargs)

    def patch(self, url: str, json: Any = None, **kwargs: Any) -> requests.Response:
        return self.send("PATCH", url, json=json, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> requests.Response:
        return self.send("DELETE", url, **kwargs)

    def build_url(self, url: str) -> str:
        """Join a relative URL onto the base URL; absolute URLs pass through"""
        if not self.base_url or url.startswith(("http://", "https://")):
            return url
        return self.base_url.rstrip("/") + "/" + url.lstrip("/")

    def send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Send a request, retrying according to ``with_timeout_retry``

        HTTP error statuses are returned as normal responses.

        Raises:
            TypeError: If a keyword argument is not understood
            requests.RequestException: The failure of the last attempt, unwrapped
        """
        unknown = sorted(set(kwargs) - set(_REQUEST_KWARGS) - set(_SEND_KWARGS))
        if unknown:
            raise TypeError(f"send() got unexpected keyword arguments: {', '.join(unknown)}")

        method = method.upper()
        full_url = self.build_url(url)

        if self.retry_policy is None:
            return self._dispatch(method, full_url, kwargs, self._hooks)

        context = RetryContext()
        predicate = compose_predicate(self.retry_policy, self.failure_classifier)
        hooks = self._hooks + [context.capture]

        return execute_with_retry(
            lambda: self._dispatch(method, full_url, kwargs, hooks),
            self.retry_policy,
            predicate,
            context,
            sleep=self._sleep,
        )

    def _dispatch(
        self,
        method: str,
        url: str,
        kwargs: Dict[str, Any],
        hooks: List[RequestHook],
    ) -> requests.Response:
        headers = dict(self.headers)
        headers.update(kwargs.get("headers") or {})

        request = requests.Request(
            method,
            url,
            headers=headers,
            **{k: kwargs[k] for k in _REQUEST_KWARGS if k in kwargs},
        )
        prepared = self.session.prepare_request(request)
        for hook in hooks:
            hook(prepared)

        send_settings = self.session.merge_environment_settings(
            prepared.url,
            kwargs.get("proxies") or {},
            kwargs.get("stream"),
            kwargs.get("verify"),
            kwargs.get("cert"),
        )
        logger.debug(f"HTTP {method} {prepared.url}")
        return self.session.send(
            prepared,
            timeout=kwargs.get("timeout", self.timeout_seconds),
            allow_redirects=kwargs.get("allow_redirects", True),
            **send_settings,
        )

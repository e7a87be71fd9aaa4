"""Generation client - one single-turn chat completion per customer report.

Usage::

    from wrapped_builder.config import Settings
    from wrapped_builder.generator.client import ReportGenerator

    generator = ReportGenerator(Settings.from_env())
    result = generator.generate(request)
    result.slides  # list of slide dicts, or None if the model returned prose
"""

from __future__ import annotations

import logging

from groq import Groq

from wrapped_builder.config import Settings
from wrapped_builder.errors import GenerationError
from wrapped_builder.generator.prompt import ReportRequest, build_prompt, fetch_website_context
from wrapped_builder.generator.sanitizer import FALLBACK_REPORT, SanitizedReport, sanitize_response


_LOGGER = logging.getLogger(__name__)


def make_client(api_key: str) -> Groq:
    return Groq(api_key=api_key)


def complete(client, prompt: str, model: str, temperature: float, max_tokens: int) -> str:
    """Send *prompt* as a single user message and return the reply text."""
    completion = client.chat.completions.create(
        messages=[{"role": "user", "content": prompt}],
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
    )
    if not completion.choices:
        return ""
    return completion.choices[0].message.content or ""


class ReportGenerator:
    """Builds the prompt, calls the model, and sanitizes the answer.

    Parameters
    ----------
    settings : Settings
        Model, sampling, and fetch settings.  The API key is only checked
        when :meth:`generate` runs.
    client : optional
        A pre-built chat client (tests pass a fake).  Created lazily from the
        API key otherwise.
    http : optional
        A ``requests``-compatible session for the website fetch.
    """

    def __init__(self, settings: Settings, client=None, http=None) -> None:
        self.settings = settings
        self._client = client
        self._http = http

    @property
    def client(self):
        if self._client is None:
            self._client = make_client(self.settings.require_api_key())
        return self._client

    def generate(self, request: ReportRequest) -> SanitizedReport:
        """Generate and sanitize one customer's report.

        Raises:
            ConfigurationError: If no API key is configured.
            GenerationError: If the generation service call fails.
        """
        if self._client is None:
            self.settings.require_api_key()

        website = fetch_website_context(
            request.business_url,
            timeout=self.settings.fetch_timeout,
            limit=self.settings.context_chars,
            session=self._http,
        )
        prompt = build_prompt(request, website_context=website)
        _LOGGER.info("Generating report for %s (%d prompt chars)",
                     request.customer.name, len(prompt))

        try:
            content = complete(
                self.client,
                prompt,
                model=self.settings.model,
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
            )
        except Exception as exc:
            _LOGGER.error("Error generating report for %s: %s", request.customer.name, exc)
            raise GenerationError("Failed to generate report", details=str(exc)) from exc

        return sanitize_response(content or FALLBACK_REPORT, gradients=request.theme.gradients)

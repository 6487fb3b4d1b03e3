import base64
from typing import Optional

import requests
import sentry_sdk
from flask import current_app

from classbook.exceptions import DocumentUnavailableException


class GitHubClient:
    """A client for the GitHub repository contents API."""

    def __init__(self, config):
        self.base_url = config.get("GITHUB_API_URL", "https://api.github.com").rstrip("/")
        self.repo = config.get("GITHUB_REPO")
        self.token = config.get("GITHUB_TOKEN")
        self.branch = config.get("GITHUB_BRANCH")
        self.timeout = config.get("GITHUB_TIMEOUT_SECONDS", 10)

    def _get_headers(self, accept="application/vnd.github.v3+json"):
        """Constructs the necessary headers for an API request."""
        return {
            "Authorization": f"token {self.token}",
            "Accept": accept,
        }

    def _sanitize_request_data(self, data):
        """
        Sanitize request data by masking sensitive fields for logging/debugging.
        Returns a copy with sensitive data masked.
        """
        if not isinstance(data, dict):
            return data

        sensitive_fields = {"authorization", "token", "secret", "content"}

        sanitized = {}
        for key, value in data.items():
            key_lower = key.lower()
            if any(sensitive_term in key_lower for sensitive_term in sensitive_fields):
                if isinstance(value, str) and len(value) > 4:
                    # Show first 2 and last 2 characters
                    sanitized[key] = f"{value[:2]}***{value[-2:]}"
                else:
                    sanitized[key] = "***"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_request_data(value)
            else:
                sanitized[key] = value

        return sanitized

    def _contents_url(self, path):
        return f"{self.base_url}/repos/{self.repo}/contents/{path.lstrip('/')}"

    def _request(self, method, path, allow_not_found=False, raw=False, **kwargs):
        """
        Makes a request to the contents API and handles the response.

        Args:
            method (str): The HTTP method (e.g., 'GET', 'PUT').
            path (str): The path of the file inside the repository.
            allow_not_found (bool): Raise DocumentUnavailableException on 404 instead of reporting it.
            raw (bool): Ask for the file body itself and return it as bytes.
            **kwargs: Additional keyword arguments to pass to the requests method.

        Returns:
            dict: The JSON response from the API, or bytes when raw is set.

        Raises:
            DocumentUnavailableException: If allow_not_found is set and the file does not exist.
            requests.exceptions.RequestException: If the request fails.
        """
        url = self._contents_url(path)
        headers = self._get_headers("application/vnd.github.raw" if raw else "application/vnd.github.v3+json")
        logger = current_app.logger

        logger.info(
            f"GitHub API Request: {method} {url} "
            f"headers={self._sanitize_request_data(headers)} "
            f"body={self._sanitize_request_data(kwargs.get('json'))}"
        )

        try:
            response = requests.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
            if allow_not_found and response.status_code == 404:
                raise DocumentUnavailableException(f"{path} does not exist in {self.repo}")
            response.raise_for_status()
            return response.content if raw else response.json()
        except requests.exceptions.HTTPError as e:
            error_context = {
                "method": method,
                "url": url,
                "status_code": e.response.status_code,
                "response_body": e.response.text,
                "request_headers": self._sanitize_request_data(headers),
            }
            if "json" in kwargs:
                error_context["request_body"] = self._sanitize_request_data(kwargs["json"])

            logger.error(
                f"GitHub API HTTP Error: {e.response.status_code} - {e.response.text}\n"
                f"Request Context: {error_context}"
            )

            with sentry_sdk.new_scope() as scope:
                scope.set_context("github_api_error", error_context)
                scope.set_tag("github_api_method", method)
                scope.set_tag("github_api_status", e.response.status_code)
                sentry_sdk.capture_exception(e)

            raise

        except requests.exceptions.RequestException as e:
            # Connection errors, timeouts and the like
            error_context = {
                "method": method,
                "url": url,
                "error_type": type(e).__name__,
            }

            logger.error(f"GitHub API request failed: {e}\n" f"Request Context: {error_context}")

            with sentry_sdk.new_scope() as scope:
                scope.set_context("github_api_error", error_context)
                scope.set_tag("github_api_method", method)
                scope.set_tag("github_error_type", type(e).__name__)
                sentry_sdk.capture_exception(e)

            raise

    def get_contents(self, path):
        """
        Retrieves a file and its metadata (base64 ``content``, ``sha``).
        """
        params = {}
        if self.branch:
            params["ref"] = self.branch
        return self._request("GET", path, allow_not_found=True, params=params)

    def put_contents(self, path, content: bytes, sha: Optional[str], message: str):
        """
        Creates or replaces a file. Without ``sha`` the file is created; with it the write is
        rejected unless ``sha`` still names the current revision.
        """
        body = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
        }
        if sha:
            body["sha"] = sha
        if self.branch:
            body["branch"] = self.branch
        return self._request("PUT", path, json=body)

    def get_raw_contents(self, path) -> bytes:
        """
        Retrieves the file body itself. Needed for files over 1 MB, whose metadata response
        carries ``"encoding": "none"`` and no content.
        """
        params = {}
        if self.branch:
            params["ref"] = self.branch
        return self._request("GET", path, allow_not_found=True, raw=True, params=params)

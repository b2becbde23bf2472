"""HTTP key-value settings adapter."""

import requests


class HttpSettingsStore:
    """
    Remote key-value settings storage.

    Implements SettingsStore protocol. The document is stored as a JSON body
    under ``{base_url}/{key}``: GET reads it, PUT replaces it. No business
    logic - just I/O.
    """

    def __init__(self, base_url: str, key: str = "taskblocks", token: str = "", timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.key = key
        self.timeout = timeout
        self._session = requests.Session()
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.key}"

    def load(self) -> dict | None:
        """Fetch the stored document. Returns None if the key does not exist."""
        resp = self._session.get(self.url, timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        data = resp.json()
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError(f"{self.url} did not return a JSON object")
        return data

    def save(self, data: dict) -> None:
        """Replace the stored document."""
        resp = self._session.put(self.url, json=data, timeout=self.timeout)
        resp.raise_for_status()

"""
Better BibTeX JSON-RPC client.

Provides access to Zotero via the Better BibTeX plugin's JSON-RPC API
for citation keys and BibLaTeX export.
"""

import json
import logging
from typing import Any

import requests

from zotero_cite.clients.library import MY_LIBRARY
from zotero_cite.utils.errors import ConnectionError, ZoteroCiteError

logger = logging.getLogger(__name__)


class BetterBibTeXError(ZoteroCiteError):
    """The JSON-RPC endpoint answered with an error."""
    pass


class BetterBibTeXClient:
    """
    Client for Better BibTeX JSON-RPC API.

    Requires Zotero to be running with Better BibTeX plugin installed.
    """

    def __init__(
        self,
        port: int = 23119,
        timeout: int = 30,
    ):
        """
        Initialize Better BibTeX client.

        Args:
            port: Zotero connector port (23119 for Zotero, 24119 for Juris-M)
            timeout: Request timeout in seconds
        """
        self.port = port
        self.timeout = timeout
        self.base_url = f"http://127.0.0.1:{port}/better-bibtex/json-rpc"
        self.headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "python/zotero-cite",
        }

    def _make_request(
        self,
        method: str,
        params: list[Any] | None = None,
    ) -> Any:
        """
        Make a JSON-RPC request.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            Result from the RPC call

        Raises:
            ConnectionError: If Zotero is not running
            BetterBibTeXError: If the RPC call fails
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": 1,
        }

        try:
            response = requests.post(
                self.base_url,
                headers=self.headers,
                data=json.dumps(payload),
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.ConnectionError as e:
            raise ConnectionError(
                "Cannot connect to Zotero",
                "Is Zotero running with Better BibTeX installed?",
            ) from e
        except requests.exceptions.Timeout as e:
            raise ConnectionError("Better BibTeX request timed out") from e

        if "error" in data:
            error = data["error"]
            msg = error.get("message", "Unknown error")
            error_data = error.get("data", "")
            if error_data:
                msg = f"{msg}: {error_data}"
            raise BetterBibTeXError(f"RPC error: {msg}")

        return data.get("result")

    def is_available(self) -> bool:
        """
        Check if Zotero is running and Better BibTeX is accessible.

        Returns:
            True if available, False otherwise
        """
        try:
            response = requests.get(
                f"http://127.0.0.1:{self.port}/better-bibtex/cayw?probe=true",
                headers=self.headers,
                timeout=5,
            )
            return response.text == "ready"
        except requests.exceptions.RequestException:
            return False

    def get_citekeys(
        self,
        item_keys: list[str],
        library_id: int = MY_LIBRARY,
    ) -> dict[str, str]:
        """
        Look up citation keys for several items at once.

        Args:
            item_keys: Zotero item keys
            library_id: Library ID

        Returns:
            Mapping of item key to citation key, for items that have one
        """
        if not item_keys:
            return {}

        qualified = [f"{library_id}:{key}" for key in item_keys]
        result = self._make_request("item.citationkey", [qualified]) or {}

        citekeys = {}
        for item_key, full_key in zip(item_keys, qualified):
            citekey = result.get(full_key) or result.get(item_key)
            if citekey:
                citekeys[item_key] = citekey
        return citekeys

    def export(
        self,
        citekeys: list[str],
        translator: str,
        library_id: int = MY_LIBRARY,
    ) -> str:
        """
        Export items using a Zotero translator.

        Args:
            citekeys: Citation keys to export
            translator: Translator ID (see ``zotero_cite.clients.library``)
            library_id: Library ID

        Returns:
            The exported text
        """
        result = self._make_request("item.export", [citekeys, translator, library_id])

        if isinstance(result, str):
            return result
        # Older Better BibTeX versions answer [status, content type, body]
        if isinstance(result, list) and len(result) > 2:
            return str(result[2])
        if isinstance(result, list) and result:
            return str(result[0]) if result[0] else ""

        return str(result) if result else ""


def get_better_bibtex_client(port: int = 23119, timeout: int = 30) -> BetterBibTeXClient | None:
    """
    Get a Better BibTeX client if available.

    Args:
        port: Zotero connector port
        timeout: Request timeout in seconds

    Returns:
        BetterBibTeXClient if Zotero is running, None otherwise
    """
    client = BetterBibTeXClient(port=port, timeout=timeout)
    if client.is_available():
        return client
    return None

# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Async HTTP clients for the BioThings APIs (MyVariant, MyGene, MyDisease).

All three APIs are public and need no authentication.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from genomcp import __version__
from genomcp.core.exceptions import UpstreamError, UpstreamNotFound, UpstreamTransientError
from genomcp.sources.base import DataSource

logger = logging.getLogger("genomcp.sources.biothings")

MYVARIANT_URL = "https://myvariant.info/v1"
MYGENE_URL = "https://mygene.info/v3"
MYDISEASE_URL = "https://mydisease.info/v1"
_TIMEOUT = 15.0
_USER_AGENT = f"genomcp/{__version__}"

VARIANT_FIELDS = "clinvar,gnomad_genome,cadd,dbnsfp,gene"
GENE_FIELDS = "symbol,name,entrezgene,ensembl.gene,genomic_pos,summary,type_of_gene"
DISEASE_FIELDS = "mondo.label,mondo.mondo,disease_ontology.name,disease_ontology.doid"
_DISEASE_HITS = 10


def _check_response(resp: httpx.Response, source: str, context: str = "") -> None:
    """Raise a typed upstream error for non-2xx responses."""
    if resp.is_success:
        return
    msg = f"{context}: HTTP {resp.status_code}" if context else f"HTTP {resp.status_code}"
    if resp.status_code == 404:
        raise UpstreamNotFound(msg, source=source, status_code=404)
    if resp.status_code == 429 or resp.status_code >= 500:
        raise UpstreamTransientError(msg, source=source, status_code=resp.status_code)
    raise UpstreamError(msg, source=source, status_code=resp.status_code)


class _BioThingsClient(DataSource):
    """Shared HTTP plumbing for the BioThings services.

    Parameters
    ----------
    base_url:
        Override the API base URL (useful for testing).
    timeout:
        HTTP timeout in seconds.
    """

    health_path = "/metadata"

    def __init__(self, base_url: str, timeout: float = _TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers={"User-Agent": _USER_AGENT},
        )

    async def _get_json(
        self, path: str, params: dict[str, Any] | None = None, context: str = ""
    ) -> Any:
        try:
            async with self._client() as client:
                resp = await client.get(f"{self.base_url}{path}", params=params)
        except httpx.HTTPError as exc:
            raise UpstreamTransientError(
                f"{context}: {type(exc).__name__}: {exc}", source=self.name
            ) from exc

        _check_response(resp, self.name, context)
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(f"{context}: invalid JSON body", source=self.name) from exc

    async def health_check(self) -> bool:
        try:
            await self._get_json(self.health_path, context=f"{self.name} health")
        except UpstreamError as exc:
            logger.warning("%s health check failed: %s", self.name, exc)
            return False
        return True


class MyVariantSource(_BioThingsClient):
    """Variant annotations from MyVariant.info, keyed by HGVS."""

    name = "myvariant"

    def __init__(self, base_url: str = MYVARIANT_URL, timeout: float = _TIMEOUT) -> None:
        super().__init__(base_url, timeout)

    async def fetch(self, query: str) -> dict[str, Any]:
        data = await self._get_json(
            f"/variant/{quote(query, safe='')}",
            params={"fields": VARIANT_FIELDS},
            context=f"get variant '{query}'",
        )
        # A batch-style lookup answers with a list; take the first document.
        if isinstance(data, list):
            data = data[0] if data else {}
        if not isinstance(data, dict) or data.get("notfound"):
            raise UpstreamNotFound(f"Variant '{query}' not found", source=self.name, status_code=404)
        return data


class MyGeneSource(_BioThingsClient):
    """Human gene records from MyGene.info, keyed by gene symbol."""

    name = "mygene"

    def __init__(self, base_url: str = MYGENE_URL, timeout: float = _TIMEOUT) -> None:
        super().__init__(base_url, timeout)

    async def fetch(self, query: str) -> dict[str, Any]:
        data = await self._get_json(
            "/query",
            params={
                "q": f"symbol:{query}",
                "species": "human",
                "fields": GENE_FIELDS,
                "size": 1,
            },
            context=f"get gene '{query}'",
        )
        hits = data.get("hits", []) if isinstance(data, dict) else []
        if not hits:
            raise UpstreamNotFound(f"Gene '{query}' not found", source=self.name, status_code=404)
        return hits[0]


class MyDiseaseSource(_BioThingsClient):
    """Candidate conditions from MyDisease.info for a free-text phenotype query.

    A query matching nothing is not an error: the result simply has no hits.
    """

    name = "mydisease"

    def __init__(self, base_url: str = MYDISEASE_URL, timeout: float = _TIMEOUT) -> None:
        super().__init__(base_url, timeout)

    async def fetch(self, query: str) -> dict[str, Any]:
        data = await self._get_json(
            "/query",
            params={"q": query, "fields": DISEASE_FIELDS, "size": _DISEASE_HITS},
            context=f"search diseases '{query}'",
        )
        hits = data.get("hits", []) if isinstance(data, dict) else []
        return {"query": query, "total": len(hits), "hits": hits}

"""Asset generation: picks stage layers and writes the collectible metadata document."""

from __future__ import annotations

import asyncio
import json
import random
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
import structlog

from lcc.assets.variants import LAYERS, RARITY_WEIGHTS, pick_variant, rarity_for
from lcc.collectibles.stages import Stage, stage_for_name
from lcc.errors import AssetLoadError

logger = structlog.get_logger()


@dataclass(frozen=True)
class AssetRefs:
    image_ref: str
    metadata_ref: str


class AssetGenerator(ABC):
    """Produces opaque image/metadata references for a collectible at a stage."""

    @abstractmethod
    async def generate(self, token_id: int, stage_name: str) -> AssetRefs:
        ...


def _layer_name(url: str) -> str:
    return Path(url).stem


class LayeredAssetGenerator(AssetGenerator):
    """Select a background and a rarity-weighted base layer, then write metadata JSON.

    The metadata document is written to ``output_dir`` and served from
    ``{public_base_url}/output``.
    """

    def __init__(
        self,
        output_dir: str | Path,
        public_base_url: str,
        creator_address: str,
        seller_fee_basis_points: int = 500,
        verify_layers: bool = False,
        rng: random.Random | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.public_base_url = public_base_url.rstrip("/")
        self.creator_address = creator_address
        self.seller_fee_basis_points = seller_fee_basis_points
        self.verify_layers = verify_layers
        self.rng = rng or random.Random()
        self._transport = transport

    async def _verify(self, kind: str, url: str) -> None:
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=10.0) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("asset_layer_load_failed", kind=kind, url=url, error=str(exc))
            raise AssetLoadError(f"Image load failed for {kind}: {url}") from exc

    def build_metadata(self, token_id: int, stage: Stage, background: str, base: str) -> dict[str, Any]:
        rarity = rarity_for(base)
        return {
            "name": f"{stage.name} #{token_id}",
            "symbol": stage.symbol,
            "description": f"A unique Lemon Club NFT at the {stage.name} stage with {rarity} rarity!",
            "image": base,
            "attributes": [
                {"trait_type": "Stage", "value": stage.name.split(" ")[1]},
                {"trait_type": "Rarity", "value": rarity},
                {"trait_type": "Background", "value": _layer_name(background)},
                {"trait_type": "Base", "value": _layer_name(base)},
            ],
            "seller_fee_basis_points": self.seller_fee_basis_points,
            "collection": {"name": "Lemon Club Collective", "family": "LCC"},
            "properties": {
                "files": [
                    {"uri": background, "type": "image/png"},
                    {"uri": base, "type": "image/png"},
                ],
                "category": "image",
                "creators": [{"address": self.creator_address, "share": 100}],
            },
        }

    def _write(self, path: Path, metadata: dict[str, Any]) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(metadata, indent=2), encoding="utf-8")

    async def generate(self, token_id: int, stage_name: str) -> AssetRefs:
        stage = stage_for_name(stage_name)
        background = pick_variant(LAYERS["backgrounds"], rng=self.rng)
        base = pick_variant(LAYERS[stage.key], RARITY_WEIGHTS, rng=self.rng)

        if self.verify_layers:
            await self._verify("background", background)
            await self._verify("base", base)

        metadata = self.build_metadata(token_id, stage, background, base)
        filename = f"nft_{token_id}_{secrets.token_hex(4)}.json"
        path = self.output_dir / filename
        try:
            await asyncio.to_thread(self._write, path, metadata)
        except OSError as exc:
            raise AssetLoadError(f"Could not write metadata for token {token_id}: {exc}") from exc

        logger.info("asset_generated", token_id=token_id, stage=stage.name, base=_layer_name(base))
        return AssetRefs(
            image_ref=base,
            metadata_ref=f"{self.public_base_url}/output/{filename}",
        )

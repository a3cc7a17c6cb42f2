"""
Error taxonomy for view materialization.

  StageNotFound          — a pipeline stage record is absent. Returned as a
                           value, never raised: "not found" is a normal answer.
  EnrichmentLookupFailed — one image lookup failed. Absorbed per item.
  UpstreamUnavailable    — the document store itself failed. The only error
                           that aborts a whole view request.
"""
from dataclasses import dataclass
from typing import Optional

SAMPLE = "sample"
RANKED = "ranked"
RERANKED = "reranked"


@dataclass(frozen=True)
class StageNotFound:
    stage: str
    feed_id: str
    # Ascending layout variants; only populated for the re-ranked stage
    available_variants: tuple[int, ...] = ()

    def as_detail(self) -> dict:
        detail = {
            "error": f"{self.stage.capitalize()} feed not found",
            "stage": self.stage,
            "feed_id": self.feed_id,
        }
        if self.stage == RERANKED:
            detail["available_n_cols"] = list(self.available_variants)
        return detail


class EnrichmentLookupFailed(Exception):
    def __init__(self, image_id: str, reason: Optional[str] = None) -> None:
        self.image_id = image_id
        self.reason = reason
        message = f"Image lookup failed for {image_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UpstreamUnavailable(Exception):
    """The document store could not be reached or failed a read."""

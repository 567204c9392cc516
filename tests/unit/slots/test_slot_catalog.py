from __future__ import annotations

from asset_orchestrator.domain.models import AssetKind
from asset_orchestrator.slots import (
    cinematic_video_request,
    default_catalog,
    illustration_requests,
)


def test_illustrations_are_square_images_in_chapter_order() -> None:
    requests = illustration_requests()

    assert [request.id for request in requests] == [f"ch{i}" for i in range(1, 9)]
    for request in requests:
        assert request.kind is AssetKind.IMAGE
        assert request.config["aspect_ratio"] == "1:1"
        assert request.config["image_size"] == "1K"
        assert request.caption


def test_cinematic_video_request() -> None:
    request = cinematic_video_request()

    assert request.id == "cinematic"
    assert request.kind is AssetKind.VIDEO
    assert dict(request.config) == {
        "number_of_videos": 1,
        "resolution": "1080p",
        "aspect_ratio": "16:9",
    }


def test_default_catalog_puts_video_first() -> None:
    catalog = default_catalog()

    assert catalog[0].id == "cinematic"
    assert len(catalog) == 9
    assert len({request.id for request in catalog}) == 9

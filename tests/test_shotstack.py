"""
Test the Shotstack client and render endpoints.
"""
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from app.api.deps import get_shotstack_service
from app.core.config import settings
from app.core.exceptions import ValidationException
from app.main import app
from app.schemas.shotstack import RenderStatus
from app.services.shotstack_service import (
    ShotstackConfigError,
    ShotstackError,
    ShotstackService,
    aspect_ratio_for_platform,
    build_merge_edit,
    estimate_duration,
    get_shotstack_config,
    is_retryable,
    validate_edit,
)

STAGE = "https://api.shotstack.io/stage"
VIDEOS = ["https://cdn.example.com/a.mp4", "https://cdn.example.com/b.mp4"]


def clip(**overrides):
    return {"asset": {"type": "video", "src": VIDEOS[0]}, "start": 0, "length": 5, **overrides}


def edit(*tracks, output=None):
    return {"timeline": {"tracks": list(tracks)}, "output": output or {"format": "mp4"}}


@pytest.fixture
def service():
    return ShotstackService("stage-key", environment="sandbox", max_retries=2, retry_delay=0)


class TestValidateEdit:
    def test_valid(self):
        validated = validate_edit(edit({"clips": [clip()]}))
        assert validated.timeline.tracks[0].clips[0].length == 5

    def test_missing_timeline(self):
        with pytest.raises(ValidationException, match="Edit must have a timeline"):
            validate_edit({"output": {"format": "mp4"}})

    def test_missing_output_format(self):
        with pytest.raises(ValidationException, match="Edit must specify output format"):
            validate_edit(edit({"clips": [clip()]}, output={"resolution": "hd"}))

    def test_all_tracks_empty(self):
        with pytest.raises(ValidationException, match="at least one track with clips"):
            validate_edit(edit({"clips": []}, {}))

    def test_empty_tracks_are_dropped(self):
        validated = validate_edit(edit({"clips": []}, {"clips": [clip()]}))
        assert len(validated.timeline.tracks) == 1

    def test_clip_without_asset_type(self):
        with pytest.raises(ValidationException, match="Track 1, Clip 2 must have a valid asset with type"):
            validate_edit(edit({"clips": [clip(), {"asset": {}, "start": 0, "length": 1}]}))

    def test_negative_start(self):
        with pytest.raises(ValidationException, match=r"Track 1, Clip 1 must have a valid start time"):
            validate_edit(edit({"clips": [clip(start=-1)]}))

    def test_zero_length(self):
        with pytest.raises(ValidationException, match=r"Track 1, Clip 1 must have a valid length"):
            validate_edit(edit({"clips": [clip(length=0)]}))


class TestMergeEdit:
    def test_title_and_transitions(self):
        merged = build_merge_edit(VIDEOS, title="Highlights", aspect_ratio="9:16")
        clips = merged["timeline"]["tracks"][0]["clips"]

        assert [c["asset"]["type"] for c in clips] == ["title", "video", "video"]
        assert [c["start"] for c in clips] == [0, 2.0, 7.0]
        assert "transition" not in clips[0]
        assert clips[1]["transition"] == {"in": "fade", "out": "fade"}
        assert merged["output"] == {"format": "mp4", "resolution": "full-hd", "aspectRatio": "9:16"}

    def test_without_title(self):
        clips = build_merge_edit(VIDEOS)["timeline"]["tracks"][0]["clips"]
        assert "transition" not in clips[0]
        assert "transition" in clips[1]

    def test_requires_videos(self):
        with pytest.raises(ValidationException):
            build_merge_edit([])

    def test_estimate_duration(self):
        assert estimate_duration(VIDEOS) == 10.0
        assert estimate_duration(VIDEOS, title="Intro") == 12.0
        assert estimate_duration(VIDEOS, durations=[3.0, 4.5]) == 7.5

    def test_aspect_ratio_for_platform(self):
        assert aspect_ratio_for_platform("TikTok") == "9:16"
        assert aspect_ratio_for_platform("facebook") == "1:1"
        assert aspect_ratio_for_platform("vimeo") == "16:9"


class TestConfig:
    def test_environment_key_wins(self, monkeypatch):
        monkeypatch.setattr(settings, "shotstack_environment", "sandbox")
        monkeypatch.setattr(settings, "shotstack_api_key", "generic-key")
        monkeypatch.setattr(settings, "shotstack_sandbox_api_key", "sandbox-key")
        assert get_shotstack_config().api_key == "sandbox-key"

    def test_generic_key_fallback(self, monkeypatch):
        monkeypatch.setattr(settings, "shotstack_environment", "production")
        monkeypatch.setattr(settings, "shotstack_api_key", "generic-key")
        monkeypatch.setattr(settings, "shotstack_production_api_key", None)
        config = get_shotstack_config()
        assert config.api_key == "generic-key"
        assert config.environment == "production"

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr(settings, "shotstack_environment", "sandbox")
        monkeypatch.setattr(settings, "shotstack_api_key", None)
        monkeypatch.setattr(settings, "shotstack_sandbox_api_key", None)
        with pytest.raises(ShotstackConfigError, match="missing for sandbox environment") as exc_info:
            get_shotstack_config()
        assert exc_info.value.status_code == 503

    def test_disabled_key(self, monkeypatch):
        monkeypatch.setattr(settings, "shotstack_environment", "sandbox")
        monkeypatch.setattr(settings, "shotstack_sandbox_api_key", "disabled")
        with pytest.raises(ShotstackConfigError, match="disabled"):
            get_shotstack_config()


def test_is_retryable():
    assert is_retryable(httpx.ConnectError("refused"))
    assert is_retryable(ShotstackError("boom", upstream_status=503))
    assert is_retryable(ShotstackError("slow down", upstream_status=429))
    assert not is_retryable(ShotstackError("bad edit", upstream_status=400))
    assert not is_retryable(ValueError("nope"))


class TestShotstackService:
    @respx.mock
    async def test_render(self, service):
        route = respx.post(f"{STAGE}/render").mock(
            return_value=httpx.Response(201, json={"success": True, "response": {"id": "job-1"}})
        )

        job_id = await service.render(build_merge_edit(VIDEOS))
        assert job_id == "job-1"
        request = route.calls.last.request
        assert request.headers["x-api-key"] == "stage-key"
        assert json.loads(request.content)["output"]["format"] == "mp4"

    @respx.mock
    async def test_render_adds_callback(self):
        service = ShotstackService("stage-key", webhook_url="https://api.example.com/v1/shotstack/webhook")
        route = respx.post(f"{STAGE}/render").mock(
            return_value=httpx.Response(201, json={"response": {"id": "job-1"}})
        )

        await service.render(build_merge_edit(VIDEOS))
        assert json.loads(route.calls.last.request.content)["callback"] == (
            "https://api.example.com/v1/shotstack/webhook"
        )

    @respx.mock
    async def test_retries_server_errors(self, service):
        route = respx.post(f"{STAGE}/render").mock(side_effect=[
            httpx.Response(500, json={"message": "Internal error"}),
            httpx.Response(201, json={"response": {"id": "job-2"}}),
        ])

        assert await service.render(build_merge_edit(VIDEOS)) == "job-2"
        assert route.call_count == 2

    @respx.mock
    async def test_client_errors_are_not_retried(self, service):
        route = respx.post(f"{STAGE}/render").mock(
            return_value=httpx.Response(400, json={"message": "Invalid asset"})
        )

        with pytest.raises(ShotstackError, match="Invalid asset") as exc_info:
            await service.render(build_merge_edit(VIDEOS))
        assert exc_info.value.upstream_status == 400
        assert route.call_count == 1

    @respx.mock
    async def test_transport_errors_exhaust_retries(self, service):
        route = respx.post(f"{STAGE}/render").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(ShotstackError, match="Shotstack request failed"):
            await service.render(build_merge_edit(VIDEOS))
        assert route.call_count == 3

    @respx.mock
    async def test_render_status(self, service):
        respx.get(f"{STAGE}/render/job-1").mock(return_value=httpx.Response(200, json={
            "response": {"id": "job-1", "status": "done", "url": "https://cdn.example.com/out.mp4", "renderTime": 812.4}
        }))

        render_status = await service.get_render_status("job-1")
        assert render_status.status == "done"
        assert render_status.finished
        assert render_status.render_time == 812.4

    @respx.mock
    async def test_wait_for_render(self, service):
        respx.get(f"{STAGE}/render/job-1").mock(side_effect=[
            httpx.Response(200, json={"response": {"id": "job-1", "status": "rendering"}}),
            httpx.Response(200, json={"response": {"id": "job-1", "status": "done", "url": "https://x/out.mp4"}}),
        ])

        render_status = await service.wait_for_render("job-1", poll_interval=0, timeout=5)
        assert render_status.url == "https://x/out.mp4"

    @respx.mock
    async def test_wait_for_failed_render(self, service):
        respx.get(f"{STAGE}/render/job-1").mock(return_value=httpx.Response(200, json={
            "response": {"id": "job-1", "status": "failed", "error": "Asset not found"}
        }))

        with pytest.raises(ShotstackError, match="Render failed: Asset not found"):
            await service.wait_for_render("job-1", poll_interval=0, timeout=5)


@pytest.fixture
def shotstack():
    fake = MagicMock(spec=ShotstackService)
    fake.render = AsyncMock(return_value="job-1")
    fake.get_render_status = AsyncMock(
        return_value=RenderStatus(id="job-1", status="done", url="https://cdn.example.com/out.mp4")
    )
    app.dependency_overrides[get_shotstack_service] = lambda: fake
    return fake


class TestRenderEndpoints:
    def test_merge_render(self, client, auth_headers, supabase, shotstack, user_id):
        supabase.set_table("shotstack_jobs", data=[{"id": 17}])

        response = client.post("/v1/shotstack/render", headers=auth_headers, json={
            "video_urls": VIDEOS,
            "title": "Highlights",
            "platform": "tiktok",
            "project_name": "Weekly recap",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Video rendering job submitted successfully"
        assert body["data"]["job_id"] == "job-1"
        assert body["data"]["db_job_id"] == "17"
        assert body["data"]["estimated_duration"] == 12.0

        submitted = shotstack.render.call_args.args[0]
        assert submitted.output.aspect_ratio == "9:16"

        record = supabase.queries_for("shotstack_jobs", "insert")[0].called("insert")[0][0]
        assert record["user_id"] == user_id
        assert record["status"] == "submitted"
        assert record["input_video_urls"] == VIDEOS
        assert record["metadata"]["edit_type"] == "merge"
        assert record["metadata"]["total_videos"] == 2

    def test_custom_edit(self, client, auth_headers, shotstack):
        response = client.post("/v1/shotstack/render", headers=auth_headers, json={
            "edit": edit({"clips": [clip(), clip(start=5, length=3)]}),
        })
        assert response.status_code == 200
        assert response.json()["data"]["estimated_duration"] == 8

    def test_invalid_custom_edit(self, client, auth_headers, shotstack):
        response = client.post("/v1/shotstack/render", headers=auth_headers, json={"edit": {"output": {}}})
        assert response.status_code == 400
        assert response.json()["error"] == "Edit must have a timeline"
        shotstack.render.assert_not_awaited()

    def test_nothing_to_render(self, client, auth_headers, shotstack):
        response = client.post("/v1/shotstack/render", headers=auth_headers, json={})
        assert response.status_code == 400

    def test_invalid_video_url(self, client, auth_headers, shotstack):
        response = client.post("/v1/shotstack/render", headers=auth_headers, json={"video_urls": ["ftp://x"]})
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    def test_upstream_failure(self, client, auth_headers, shotstack):
        shotstack.render.side_effect = ShotstackError("Shotstack API error: 503 Service Unavailable")

        response = client.post("/v1/shotstack/render", headers=auth_headers, json={"video_urls": VIDEOS})
        assert response.status_code == 502
        assert response.json()["code"] == "shotstack_error"

    def test_not_configured(self, client, auth_headers):
        response = client.post("/v1/shotstack/render", headers=auth_headers, json={"video_urls": VIDEOS})
        assert response.status_code == 503
        assert response.json()["code"] == "shotstack_error"

    def test_save_failure(self, client, auth_headers, supabase, shotstack):
        supabase.set_table("shotstack_jobs", error=Exception("insert failed"))

        response = client.post("/v1/shotstack/render", headers=auth_headers, json={"video_urls": VIDEOS})
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to save job to database"

    def test_status(self, client, auth_headers, supabase, shotstack, user_id):
        response = client.get("/v1/shotstack/render/job-1", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "done"

        query = supabase.queries_for("shotstack_jobs", "update")[0]
        assert query.called("update")[0][0]["video_url"] == "https://cdn.example.com/out.mp4"
        assert ("shotstack_job_id", "job-1") in query.called("eq")
        assert ("user_id", user_id) in query.called("eq")

    def test_status_survives_update_failure(self, client, auth_headers, supabase, shotstack):
        supabase.set_table("shotstack_jobs", error=Exception("update failed"))
        assert client.get("/v1/shotstack/render/job-1", headers=auth_headers).status_code == 200


class TestWebhook:
    def test_done(self, client, supabase):
        supabase.set_table("shotstack_jobs", data=[{"metadata": {"project_name": "Weekly recap"}}])

        response = client.post("/v1/shotstack/webhook", json={
            "id": "job-1",
            "status": "done",
            "url": "https://cdn.example.com/out.mp4",
            "duration": 12.5,
            "renderTime": 3020,
        })
        assert response.status_code == 200
        assert response.json()["message"] == "Webhook processed successfully"

        update = supabase.queries_for("shotstack_jobs", "update")[0].called("update")[0][0]
        assert update["status"] == "done"
        assert update["video_url"] == "https://cdn.example.com/out.mp4"
        assert update["metadata"]["project_name"] == "Weekly recap"
        assert update["metadata"]["duration"] == 12.5

    def test_failed_render(self, client, supabase):
        response = client.post("/v1/shotstack/webhook", json={
            "id": "job-1", "status": "failed", "error": "Asset not found",
        })
        assert response.status_code == 200
        update = supabase.queries_for("shotstack_jobs", "update")[0].called("update")[0][0]
        assert update["error_message"] == "Asset not found"
        assert "metadata" not in update

    def test_database_failure(self, client, supabase):
        supabase.set_table("shotstack_jobs", error=Exception("down"))
        response = client.post("/v1/shotstack/webhook", json={"id": "job-1", "status": "done"})
        assert response.status_code == 500
        assert response.json()["error"] == "Webhook processing failed"

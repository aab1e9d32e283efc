import json
import logging

import pytest
import requests
import responses

from farm_assistant.adapters import DiseaseImageAdapter, DiseaseResult, PestQueryResult, get_adapter
from farm_assistant.errors import (
    InvalidQuery,
    MalformedResponse,
    NoMediaSelected,
    PermissionDenied,
    ServiceError,
    TransportFailure,
)
from farm_assistant.media import SourceKind
from farm_assistant.pipeline import DiagnosticPipeline, PipelineState, PipelineStatus

from conftest import BASE_URL, image_bytes

PLANT_URL = f"{BASE_URL}/upload/plant-image"
PEST_IMAGE_URL = f"{BASE_URL}/upload-pest-image/"
PEST_DATA_URL = f"{BASE_URL}/retrieve_pest_data"

LEAF_BLIGHT = {
    "status": "success",
    "message": "ok",
    "disease_prediction": {"predicted": "Leaf Blight", "explanation": "Fungal lesions on leaves."},
}

APHID = {"pest_name": "Aphid", "pesticide": "Neem oil", "ai_response": "Spray weekly."}


@responses.activate
def test_submit_without_media_fails_without_network(disease_pipeline):
    state = disease_pipeline.submit()

    assert state.status == PipelineStatus.FAILED
    assert isinstance(state.error, NoMediaSelected)
    assert state.error_message == "Please select or capture an image first."
    assert len(responses.calls) == 0


@responses.activate
def test_disease_success(disease_pipeline, media):
    responses.add(responses.POST, PLANT_URL, json=LEAF_BLIGHT)
    disease_pipeline.attach_media(media)

    state = disease_pipeline.submit()

    assert state.status == PipelineStatus.SUCCEEDED
    assert state.result == DiseaseResult(predicted_label="Leaf Blight", explanation="Fungal lesions on leaves.")
    body = responses.calls[0].request.body
    assert b'name="file"; filename="plant-image.jpg"' in body
    assert b"Content-Type: image/jpeg" in body
    assert media.content in body
    assert disease_pipeline.request.endpoint == "disease-image"
    assert disease_pipeline.request.media is media


@responses.activate
def test_disease_server_error_keeps_status_and_body(disease_pipeline, media):
    responses.add(responses.POST, PLANT_URL, body="server error", status=500)
    disease_pipeline.attach_media(media)

    state = disease_pipeline.submit()

    assert state.status == PipelineStatus.FAILED
    assert isinstance(state.error, ServiceError)
    assert "500" in state.error_message
    assert "server error" in state.error_message
    assert state.error_message.startswith("Failed to process the image: Upload failed!")


@responses.activate
def test_disease_without_status_flag_is_malformed(disease_pipeline, media, caplog):
    payload = {"disease_prediction": LEAF_BLIGHT["disease_prediction"]}
    responses.add(responses.POST, PLANT_URL, json=payload)
    disease_pipeline.attach_media(media)

    with caplog.at_level(logging.WARNING, logger="farm_assistant.pipeline"):
        state = disease_pipeline.submit()

    assert isinstance(state.error, MalformedResponse)
    assert "No valid disease prediction" in state.error_message
    assert "Malformed response" in caplog.text


@responses.activate
def test_disease_without_prediction_is_malformed(disease_pipeline, media):
    responses.add(responses.POST, PLANT_URL, json={"status": "success", "message": "no leaf found"})
    disease_pipeline.attach_media(media)

    assert isinstance(disease_pipeline.submit().error, MalformedResponse)


@responses.activate
def test_transport_failure_reports_exception_message(disease_pipeline, media):
    responses.add(responses.POST, PLANT_URL, body=requests.ConnectionError("connection refused"))
    disease_pipeline.attach_media(media)

    state = disease_pipeline.submit()

    assert isinstance(state.error, TransportFailure)
    assert "connection refused" in state.error_message


@responses.activate
def test_submit_while_submitting_is_ignored(disease_pipeline, media):
    inner_states = []

    def callback(request):
        inner_states.append(disease_pipeline.submit())
        return 200, {}, json.dumps(LEAF_BLIGHT)

    responses.add_callback(responses.POST, PLANT_URL, callback=callback, content_type="application/json")
    disease_pipeline.attach_media(media)

    state = disease_pipeline.submit()

    assert len(responses.calls) == 1
    assert inner_states[0].status == PipelineStatus.SUBMITTING
    assert state.status == PipelineStatus.SUCCEEDED


@responses.activate
def test_result_for_replaced_media_is_discarded(disease_pipeline, media, store, caplog):
    newer = store.save(image_bytes(color="red"), SourceKind.CAMERA)

    def callback(request):
        disease_pipeline.attach_media(newer)
        return 200, {}, json.dumps(LEAF_BLIGHT)

    responses.add_callback(responses.POST, PLANT_URL, callback=callback, content_type="application/json")
    disease_pipeline.attach_media(media)

    with caplog.at_level(logging.INFO, logger="farm_assistant.pipeline"):
        state = disease_pipeline.submit()

    assert state == PipelineState.idle()
    assert disease_pipeline.state.result is None
    assert disease_pipeline.media is newer
    assert "media changed" in caplog.text


@responses.activate
def test_failure_for_replaced_media_is_discarded(disease_pipeline, media, store):
    newer = store.save(image_bytes(color="red"), SourceKind.CAMERA)

    def callback(request):
        disease_pipeline.attach_media(newer)
        return 500, {}, "server error"

    responses.add_callback(responses.POST, PLANT_URL, callback=callback)
    disease_pipeline.attach_media(media)

    assert disease_pipeline.submit().status == PipelineStatus.IDLE


@responses.activate
def test_resubmit_after_success_repeats_identical_request(disease_pipeline, media):
    responses.add(responses.POST, PLANT_URL, json=LEAF_BLIGHT)
    disease_pipeline.attach_media(media)

    first = disease_pipeline.submit()
    second = disease_pipeline.submit()

    assert len(responses.calls) == 2
    assert responses.calls[0].request.body.count(media.content) == 1
    assert responses.calls[1].request.body.count(media.content) == 1
    assert first.result == second.result


@responses.activate
def test_retry_after_failure(disease_pipeline, media):
    responses.add(responses.POST, PLANT_URL, body="busy", status=503)
    responses.add(responses.POST, PLANT_URL, json=LEAF_BLIGHT)
    disease_pipeline.attach_media(media)

    assert disease_pipeline.submit().status == PipelineStatus.FAILED
    assert disease_pipeline.submit().status == PipelineStatus.SUCCEEDED


def test_new_media_clears_previous_result(disease_pipeline, media):
    disease_pipeline.state = PipelineState.succeeded(DiseaseResult("Rust", "Orange pustules"))

    disease_pipeline.attach_media(media)

    assert disease_pipeline.state == PipelineState.idle()
    assert disease_pipeline.media is media


def test_report_error_keeps_media(disease_pipeline, media):
    disease_pipeline.attach_media(media)

    state = disease_pipeline.report_error(InvalidQuery("nope"))

    assert state.status == PipelineStatus.FAILED
    assert disease_pipeline.media is media


def test_missing_client_fails_instead_of_raising(media):
    pipeline = DiagnosticPipeline(DiseaseImageAdapter(), None)
    pipeline.attach_media(media)

    state = pipeline.submit()

    assert isinstance(state.error, TransportFailure)
    assert "No backend URL configured" in state.error_message


@responses.activate
def test_pest_image_success(pest_pipeline, media):
    responses.add(
        responses.POST,
        PEST_IMAGE_URL,
        json={"pest_detection": {"predicted_class": "Whitefly", "explanation": "Tiny white insects", "control": "Yellow sticky traps"}},
    )
    pest_pipeline.attach_media(media)

    state = pest_pipeline.submit()

    assert state.result.predicted_label == "Whitefly"
    assert state.result.control == "Yellow sticky traps"
    assert b'filename="pest-image.jpg"' in responses.calls[0].request.body


@responses.activate
def test_pest_image_without_detection_is_malformed(pest_pipeline, media):
    responses.add(responses.POST, PEST_IMAGE_URL, json={"message": "nothing found"})
    pest_pipeline.attach_media(media)

    state = pest_pipeline.submit()

    assert isinstance(state.error, MalformedResponse)
    assert "pest detection" in state.error_message


@responses.activate
def test_pest_query_with_unreachable_image_still_succeeds(query_pipeline):
    responses.add(responses.POST, PEST_DATA_URL, json=APHID)
    responses.add(responses.GET, f"{BASE_URL}/get_pest_image/Aphid", status=404)

    state = query_pipeline.submit("small green insect")

    assert state.status == PipelineStatus.SUCCEEDED
    assert state.result == PestQueryResult(pest_name="Aphid", pesticide="Neem oil", ai_explanation="Spray weekly.")
    assert state.result.image_url is None
    assert json.loads(responses.calls[0].request.body) == {"query": "small green insect"}


@responses.activate
def test_pest_query_probe_transport_error_is_not_fatal(query_pipeline):
    responses.add(responses.POST, PEST_DATA_URL, json=APHID)
    responses.add(responses.GET, f"{BASE_URL}/get_pest_image/Aphid", body=requests.ConnectionError("offline"))

    state = query_pipeline.submit("small green insect")

    assert state.status == PipelineStatus.SUCCEEDED
    assert state.result.image_url is None


@responses.activate
def test_pest_query_attaches_reachable_image(query_pipeline):
    payload = dict(APHID, pest_name="Fall Armyworm")
    image_url = f"{BASE_URL}/get_pest_image/Fall%20Armyworm"
    responses.add(responses.POST, PEST_DATA_URL, json=payload)
    responses.add(responses.GET, image_url, body=b"\xff\xd8", content_type="image/jpeg")

    state = query_pipeline.submit("worms in maize whorl")

    assert state.result.image_url == image_url


@responses.activate
def test_blank_query_is_rejected_locally(query_pipeline):
    state = query_pipeline.submit("   ")

    assert isinstance(state.error, InvalidQuery)
    assert state.error_message == "Please enter a pest query."
    assert len(responses.calls) == 0


@responses.activate
def test_pest_query_service_error(query_pipeline):
    responses.add(responses.POST, PEST_DATA_URL, body="pest not found", status=404)

    state = query_pipeline.submit("purple beetle")

    assert state.error_message == "Error: Failed to retrieve pest data: Status: 404, Details: pest not found"


def test_device_errors_are_shown_verbatim(disease_pipeline):
    state = disease_pipeline.report_error(PermissionDenied("Permission to access gallery was denied."))

    assert state.error_message == "Permission to access gallery was denied."


def test_adapter_registry():
    assert isinstance(get_adapter("disease-image"), DiseaseImageAdapter)
    with pytest.raises(ValueError, match="Unknown endpoint"):
        get_adapter("yield-image")

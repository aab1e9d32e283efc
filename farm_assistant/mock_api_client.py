# farm_assistant/mock_api_client.py
from .api_client import ApiClient
from .errors import ServiceError

MOCK_BASE_URL = "http://mock.farm-assistant.local"

# -----------------------
# Canned service responses
# -----------------------

PLANT_IMAGE_RESPONSE = {
    "status": "success",
    "message": "Image processed",
    "disease_prediction": {
        "predicted": "Tomato Early Blight",
        "explanation": "Dark concentric rings on older leaves point to Alternaria solani. "
        "Remove affected leaves and apply a copper or chlorothalonil fungicide.",
    },
}

PEST_IMAGE_RESPONSE = {
    "pest_detection": {
        "predicted_class": "Aphid",
        "explanation": "Small soft-bodied insects clustered on new growth and leaf undersides.",
        "control": "Spray neem oil or insecticidal soap; encourage ladybirds.",
    }
}

PEST_DATA_RESPONSE = {
    "pest_name": "Aphid",
    "pesticide": "Neem oil",
    "ai_response": "Aphids suck sap from tender shoots. Neem oil at 5 ml per litre "
    "applied every 7 days keeps colonies in check.",
}

WEATHER_RESPONSE = {
    "timestamp": "2024-01-01T06:00:00Z",
    "fetch_time": 1704088800,
    "temp": 27.4,
    "feels_like": 29.1,
    "temp_min": 25.0,
    "temp_max": 30.2,
    "pressure": 1012,
    "humidity": 68,
    "wind_speed": 3.6,
    "wind_direction": 220,
    "weather_main": "Clouds",
    "weather_description": "scattered clouds",
    "clouds": 40,
    "city": "Coimbatore",
    "rain_chance": 20,
}

RESPONSES = {
    "/upload/plant-image": PLANT_IMAGE_RESPONSE,
    "/upload-pest-image/": PEST_IMAGE_RESPONSE,
    "/retrieve_pest_data": PEST_DATA_RESPONSE,
    "/fetch-current-weather-data": WEATHER_RESPONSE,
}


class MockApiClient(ApiClient):
    """Offline stand-in for the service; no request leaves the process."""

    def __init__(self):
        super().__init__(MOCK_BASE_URL)
        self.calls = []

    def _canned(self, path):
        self.calls.append(path)
        if path not in RESPONSES:
            raise ServiceError(404, f"Not Found: {path}")
        return RESPONSES[path]

    def post_file(self, path, files):
        return self._canned(path)

    def post_json(self, path, payload):
        return self._canned(path)

    def get_json(self, path):
        return self._canned(path)

    def probe(self, url):
        # No pest images are bundled offline.
        return False

"""
Pytest fixtures and configuration for the country cache tests
"""
import httpx
import pytest

COUNTRIES_URL = "https://countries.test/v2/all"
RATES_URL = "https://rates.test/v6/latest/USD"


@pytest.fixture(autouse=True)
def feed_settings(settings, tmp_path):
    """Point the feeds at fake hosts and the summary image at a temp dir"""
    settings.COUNTRIES_API_URL = COUNTRIES_URL
    settings.EXCHANGE_RATE_API_URL = RATES_URL
    settings.EXTERNAL_API_TIMEOUT = 10.0
    settings.SUMMARY_IMAGE_PATH = str(tmp_path / "cache" / "summary.png")
    settings.SNAPSHOT_FONT_PATH = None
    return settings


@pytest.fixture
def fixed_multiplier():
    """Multiplier source that always returns 1500"""
    return lambda: 1500


@pytest.fixture
def sample_countries():
    """Countries feed payload covering the currency edge cases"""
    return [
        {
            'name': 'Nigeria',
            'capital': 'Abuja',
            'region': 'Africa',
            'population': 206139589,
            'flag': 'https://flagcdn.com/ng.svg',
            'currencies': [{'code': 'NGN', 'name': 'Nigerian naira', 'symbol': '₦'}],
        },
        {
            'name': 'France',
            'capital': 'Paris',
            'region': 'Europe',
            'population': 67391582,
            'flag': 'https://flagcdn.com/fr.svg',
            'currencies': [{'code': 'EUR', 'name': 'Euro', 'symbol': '€'}],
        },
        {
            'name': 'Antarctica',
            'region': 'Polar',
            'population': 1000,
            'flag': 'https://flagcdn.com/aq.svg',
            'currencies': [],
        },
        {
            'name': 'Ghana',
            'capital': 'Accra',
            'region': 'Africa',
            'population': 31072940,
            'flag': 'https://flagcdn.com/gh.svg',
            'currencies': [{'code': 'GHS', 'name': 'Ghanaian cedi', 'symbol': '₵'}],
        },
    ]


@pytest.fixture
def sample_rates():
    """Exchange rate table; GHS is deliberately missing"""
    return {'USD': 1, 'NGN': 1600.0, 'EUR': 0.92}


@pytest.fixture
def feed_transport():
    """
    Factory for an httpx.MockTransport serving both feeds.

    `countries_response` / `rates_response` override the default 200 response
    and may be an httpx.Response or an httpx exception class to raise.
    """
    def _build(countries, rates, countries_response=None, rates_response=None):
        def handler(request):
            if request.url.host == httpx.URL(COUNTRIES_URL).host:
                response = countries_response or httpx.Response(200, json=countries)
            else:
                response = rates_response or httpx.Response(200, json={'result': 'success', 'base_code': 'USD', 'rates': rates})
            if isinstance(response, type) and issubclass(response, Exception):
                raise response("simulated failure", request=request)
            return response

        return httpx.MockTransport(handler)

    return _build

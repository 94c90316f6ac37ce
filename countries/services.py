# countries/services.py
import asyncio
import logging
import math
import random

import httpx
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from . import snapshot
from .exceptions import CountryNotFound, ExternalServiceError, StorageError
from .models import Country, RefreshStatus


# ==============================================================================
# CONFIGURATION AND SETUP
# ==============================================================================

# Get a logger instance specific to this 'countries' app.
# The logger's behavior is configured in the main settings.py file.
logger = logging.getLogger('countries')

# Bounds of the random multiplier used by the GDP estimate, [low, high).
MULTIPLIER_LOW = 1000
MULTIPLIER_HIGH = 2000


def random_multiplier():
    """Draws a multiplier uniformly from [MULTIPLIER_LOW, MULTIPLIER_HIGH)."""
    return MULTIPLIER_LOW + random.random() * (MULTIPLIER_HIGH - MULTIPLIER_LOW)


def _parse_population(country_data):
    try:
        return max(int(country_data.get('population') or 0), 0)
    except (TypeError, ValueError):
        logger.warning(f"Invalid population for {country_data.get('name')}: {country_data.get('population')!r}")
        return 0


# ==============================================================================
# EXTERNAL FEEDS
# ==============================================================================

async def _get_json(client, url, service_name):
    """GETs one feed and returns its decoded JSON body, or raises ExternalServiceError."""
    try:
        response = await client.get(url)
        response.raise_for_status()
        logger.debug(f"{service_name} responded with status {response.status_code}")
        return response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"{service_name} returned non-2xx status: {e.response.status_code}")
        raise ExternalServiceError() from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        # Network-level errors like timeouts or connection issues.
        logger.error(f"A network error occurred while calling {service_name}: {e}", exc_info=True)
        raise ExternalServiceError() from e
    except ValueError as e:
        logger.error(f"{service_name} returned a body that is not valid JSON.")
        raise ExternalServiceError() from e


async def fetch_external_data(transport=None):
    """
    Asynchronously fetches the countries feed and the exchange rate feed concurrently.

    Returns a tuple of (countries, rates) where `countries` is a list of country
    dicts and `rates` maps currency code to rate. If either call fails for any
    reason a single ExternalServiceError is raised.
    """
    logger.info("Starting concurrent fetch from external APIs...")
    async with httpx.AsyncClient(timeout=settings.EXTERNAL_API_TIMEOUT, transport=transport) as client:
        tasks = [
            asyncio.create_task(_get_json(client, settings.COUNTRIES_API_URL, "Countries API")),
            asyncio.create_task(_get_json(client, settings.EXCHANGE_RATE_API_URL, "Exchange Rate API")),
        ]
        # Stop at the first failure instead of waiting out the other request.
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    for task in done:
        if task.exception() is not None:
            raise task.exception()

    countries_payload, rates_payload = (task.result() for task in tasks)
    if not isinstance(countries_payload, list) or not all(isinstance(c, dict) for c in countries_payload):
        logger.error("Countries API payload is not a list of country objects.")
        raise ExternalServiceError()
    rates = rates_payload.get('rates') if isinstance(rates_payload, dict) else None
    if not isinstance(rates, dict):
        logger.error("Exchange Rate API payload has no 'rates' mapping.")
        raise ExternalServiceError()

    logger.info("Successfully fetched data from both APIs.")
    return countries_payload, rates


# ==============================================================================
# GDP ESTIMATION
# ==============================================================================

def estimate_gdp(country_data, rates, multiplier=None):
    """
    Derives (currency_code, exchange_rate, estimated_gdp) for one country.

    Only the first listed currency is used. Without a currency, or without a
    positive rate for it, the exchange rate is None and the GDP estimate is 0.
    `multiplier` is a zero-argument callable, `random_multiplier` by default.
    """
    currencies = country_data.get('currencies') or []
    if not currencies:
        return None, None, 0.0

    currency_code = (currencies[0] or {}).get('code')
    raw_rate = rates.get(currency_code) if currency_code else None
    if raw_rate is None:
        return currency_code, None, 0.0

    try:
        exchange_rate = float(raw_rate)
    except (TypeError, ValueError):
        logger.warning(f"Could not parse exchange rate for {country_data.get('name')} (Currency: {currency_code}). Value: {raw_rate}")
        return currency_code, None, 0.0
    # JSON feeds can carry NaN and Infinity literals.
    if not math.isfinite(exchange_rate) or exchange_rate <= 0:
        return currency_code, None, 0.0

    draw = (multiplier or random_multiplier)()
    return currency_code, exchange_rate, _parse_population(country_data) * draw / exchange_rate


# ==============================================================================
# RECONCILIATION
# ==============================================================================

def reconcile_countries(incoming, refreshed_at):
    """
    Inserts or updates one Country per incoming record. Must run inside a transaction.

    `incoming` yields (country_data, (currency_code, exchange_rate, estimated_gdp)).
    Existing rows are matched case-insensitively and keep their stored name.
    Each lookup sees the rows written earlier in the same batch.
    Returns a (created, updated) tuple.
    """
    created = updated = 0
    for country_data, (currency_code, exchange_rate, estimated_gdp) in incoming:
        name = country_data.get('name')
        if not isinstance(name, str) or not name.strip():
            logger.warning(f"Skipping country with missing name: {country_data}")
            continue

        values = {
            'capital': country_data.get('capital'),
            'region': country_data.get('region'),
            'population': _parse_population(country_data),
            'currency_code': currency_code,
            'exchange_rate': exchange_rate,
            'estimated_gdp': estimated_gdp,
            'flag_url': country_data.get('flag'),
            'last_refreshed_at': refreshed_at,
        }

        instance = Country.objects.by_name(name).first()
        if instance:
            for field, value in values.items():
                setattr(instance, field, value)
            instance.save(update_fields=list(values))
            updated += 1
        else:
            Country.objects.create(name=name, **values)
            created += 1

    return created, updated


# ==============================================================================
# MAIN DATA REFRESH LOGIC
# ==============================================================================

def refresh_country_data(multiplier=None, transport=None):
    """
    Runs one full refresh cycle: fetch, estimate, reconcile, update status, snapshot.

    Raises ExternalServiceError before touching storage if a feed fails, and
    StorageError if the transaction fails (nothing is persisted in that case).
    A failing snapshot is logged and reported in the result, never raised.
    """
    logger.info("Country data refresh process initiated.")

    countries_data, exchange_rates = asyncio.run(fetch_external_data(transport=transport))
    logger.info(f"Processing {len(countries_data)} countries and {len(exchange_rates)} exchange rates.")

    refreshed_at = timezone.now()
    staged = [(country_data, estimate_gdp(country_data, exchange_rates, multiplier)) for country_data in countries_data]

    try:
        with transaction.atomic():
            logger.debug("Starting atomic database transaction...")
            created, updated = reconcile_countries(staged, refreshed_at)
            logger.info(f"Created {created} and updated {updated} countries.")

            # Counted from storage so rows missing from this feed are included.
            total_countries = Country.objects.count()
            RefreshStatus.objects.update_or_create(
                pk=RefreshStatus.SINGLETON_PK,
                defaults={'total_countries': total_countries, 'last_refreshed_at': refreshed_at},
            )
            logger.info(f"Updated refresh status: {total_countries} countries at {refreshed_at}")
            logger.debug("Committing database transaction.")
    except DatabaseError as e:
        logger.error(f"Database error during refresh, transaction rolled back: {e}", exc_info=True)
        raise StorageError("Failed to save data to the database.") from e

    snapshot_generated = _generate_snapshot()

    logger.info("Country data refresh process completed successfully.")
    return {
        "status": "success",
        "countries_processed": len(countries_data),
        "countries_created": created,
        "countries_updated": updated,
        "total_countries": total_countries,
        "last_refreshed_at": refreshed_at,
        "snapshot_generated": snapshot_generated,
    }


def _generate_snapshot():
    # The data is already committed at this point, so a rendering problem
    # must not turn a successful refresh into a failed one.
    try:
        snapshot.generate_summary_image()
    except Exception as e:
        logger.error(f"Failed to generate summary image: {e}", exc_info=True)
        return False
    return True


# ==============================================================================
# READ / DELETE OPERATIONS
# ==============================================================================

def get_country(name):
    country = Country.objects.by_name(name).first()
    if country is None:
        logger.warning(f"Country with name '{name}' not found.")
        raise CountryNotFound()
    return country


def delete_country(name):
    country = get_country(name)
    country.delete()
    logger.info(f"Successfully deleted country: {country.name}")
    return country


def get_refresh_status():
    """Returns the status summary, with zero/None defaults before the first refresh."""
    status = RefreshStatus.objects.filter(pk=RefreshStatus.SINGLETON_PK).first()
    if status is None:
        return {"total_countries": 0, "last_refreshed_at": None}
    return {"total_countries": status.total_countries, "last_refreshed_at": status.last_refreshed_at}

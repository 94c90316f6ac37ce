# countries/models.py
from django.db import models


class CountryQuerySet(models.QuerySet):
    def by_name(self, name):
        # Names are matched through the normalized key, never the display name.
        return self.filter(name_key=Country.normalize_name(name))


class Country(models.Model):
    name = models.CharField(max_length=100)
    # Lowercased copy of `name`. The unique index on it is what makes
    # "France" and "FRANCE" the same country.
    name_key = models.CharField(max_length=100, unique=True, editable=False)
    capital = models.CharField(max_length=100, null=True, blank=True)
    region = models.CharField(max_length=100, null=True, blank=True)
    population = models.BigIntegerField(default=0)
    currency_code = models.CharField(max_length=10, null=True, blank=True)
    exchange_rate = models.FloatField(null=True, blank=True)
    estimated_gdp = models.FloatField(default=0)
    flag_url = models.URLField(max_length=200, null=True, blank=True)
    last_refreshed_at = models.DateTimeField(null=True, blank=True)

    objects = CountryQuerySet.as_manager()

    class Meta:
        verbose_name_plural = "Countries"
        ordering = ['id']

    def __str__(self):
        return self.name

    @staticmethod
    def normalize_name(name):
        return name.lower()

    def save(self, *args, **kwargs):
        self.name_key = self.normalize_name(self.name)
        super().save(*args, **kwargs)


class RefreshStatus(models.Model):
    """
    Singleton row (pk=1) describing the most recent successful refresh.
    It is replaced wholesale on every refresh and absent before the first one.
    """
    SINGLETON_PK = 1

    total_countries = models.PositiveIntegerField(default=0)
    last_refreshed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name_plural = "Refresh status"

    def __str__(self):
        if self.last_refreshed_at:
            return f"{self.total_countries} countries, refreshed at {self.last_refreshed_at}"
        return "Never refreshed"

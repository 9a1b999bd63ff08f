"""Country domain service - read-only reference lookups."""

from dataclasses import dataclass

from .exceptions import ResourceNotFound
from .models import Country
from .ports import CountryRepository


@dataclass
class CountryService:
    repository: CountryRepository

    def list_countries(self) -> list[Country]:
        return self.repository.list_countries()

    def get_country(self, abbrev: str) -> Country:
        """
        Look up a country by its code, case-insensitively.

        Raises:
            ResourceNotFound: If the code is unknown
        """
        country = self.repository.get_by_abbrev(abbrev)
        if country is None:
            raise ResourceNotFound(f"Country {abbrev.upper()} not found")
        return country

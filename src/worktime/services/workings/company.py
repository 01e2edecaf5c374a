"""Resolution of a company reference to a canonical ``{id, name}``."""

from typing import Any, Dict, List, Optional, Protocol, Union

from ...errors import NotFoundError
from ...models.working import Company


class CompanyLookup(Protocol):
    async def find_companies_by_id(self, company_id: str) -> List[Dict[str, Any]]:
        ...

    async def find_companies_by_name(self, name: str) -> List[Dict[str, Any]]:
        ...


def get_company_name(name: Union[str, List[str]]) -> str:
    """Directory names may hold several aliases; the first one is canonical."""
    if isinstance(name, list):
        return get_company_name(name[0])
    return name


class CompanyResolver:
    def __init__(self, lookup: CompanyLookup):
        self.lookup = lookup

    async def resolve(
        self, company_id: Optional[str], company_query: Optional[str]
    ) -> Company:
        """
        An explicit id must exist in the directory; its directory name is used.

        A free-text query is tried as an id first, then as an exact
        upper-cased name. Only a single name match supplies an id; otherwise
        the upper-cased query is kept as the name with no id.

        Raises:
            NotFoundError: If ``company_id`` is given but unknown
        """
        if company_id:
            results = await self.lookup.find_companies_by_id(company_id)
            if not results:
                raise NotFoundError(f"company {company_id} does not exist")
            return Company(id=company_id, name=get_company_name(results[0]["name"]))

        results = await self.lookup.find_companies_by_id(company_query)
        if results:
            return Company(
                id=results[0]["id"], name=get_company_name(results[0]["name"])
            )

        name_results = await self.lookup.find_companies_by_name(company_query.upper())
        if len(name_results) == 1:
            return Company(
                id=name_results[0]["id"],
                name=get_company_name(name_results[0]["name"]),
            )
        return Company(name=company_query.upper())

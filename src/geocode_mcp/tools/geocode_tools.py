from __future__ import annotations

from typing import Any

from fastmcp import FastMCP
from pydantic import BaseModel, Field

from geocode_mcp.app.container import Container


class GeocodeAddressArgs(BaseModel):
    address: str = Field(..., description="Raw address, comma separated (street, city, postal code, ..., country)")


class GeocodeAddressesArgs(BaseModel):
    addresses: list[str] = Field(..., min_length=1, max_length=200, description="Raw addresses, resolved in order")


class GeocodeOutcome(BaseModel):
    """Coordinates for one address, or the number of attempts that failed."""

    ok: bool
    latitude: float | None = None
    longitude: float | None = None
    display_name: str | None = None
    successful_address: str | None = Field(None, description="Candidate text that the backend resolved")
    strategy: str | None = Field(None, description="Rule that produced the successful candidate")
    attempts_made: int = 0
    from_cache: bool = False


class BatchOutcome(BaseModel):
    total: int
    resolved: int
    cached: int
    failed: int
    outcomes: list[GeocodeOutcome] = Field(default_factory=list)


class AddressVariation(BaseModel):
    text: str
    strategy: str
    rank: int


def register_geocode_tools(mcp: FastMCP, container: Container) -> None:
    service = container.geocode_service

    @mcp.tool(
        name="geocode_address",
        description=(
            "Resolve a noisy real-estate address from Belgium, Luxembourg, France or Germany to coordinates. "
            "The address is cleaned, simplified step by step and queried against OpenStreetMap Nominatim "
            "until one variation resolves."
        ),
    )
    async def geocode_address(address: str) -> GeocodeOutcome:
        args = GeocodeAddressArgs(address=address)
        outcome = await service.geocode(args.address)
        return GeocodeOutcome(**outcome.to_dict())

    @mcp.tool(
        name="geocode_addresses",
        description=(
            "Resolve a list of addresses one after another. Failed addresses are reported, "
            "they never stop the batch."
        ),
    )
    async def geocode_addresses(addresses: list[str]) -> BatchOutcome:
        args = GeocodeAddressesArgs(addresses=addresses)
        summary = await service.geocode_many(args.addresses)

        data = summary.to_dict()
        return BatchOutcome(
            total=data["total"],
            resolved=data["resolved"],
            cached=data["cached"],
            failed=data["failed"],
            outcomes=[GeocodeOutcome(**o) for o in data["outcomes"]],
        )

    @mcp.tool(
        name="address_variations",
        description="List the query variations that would be tried for an address, in trial order.",
    )
    def address_variations(address: str) -> list[AddressVariation]:
        return [AddressVariation(**c.to_dict()) for c in service.variations(address)]

    @mcp.tool(
        name="diagnose_address",
        description="Report problems in an address that commonly make geocoding fail.",
    )
    def diagnose_address(address: str) -> dict[str, Any]:
        return service.diagnose(address).to_dict()

"""Example usage of MoovitClient."""

import logging
import sys
from pathlib import Path

# Add src to path so we can import moovit
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from moovit import AliasInput, MoovitClient, MoovitError, TextInput

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def print_routes(client: MoovitClient, origin: str, destination: str):
    """
    Plan a trip and print each itinerary.

    Args:
        client: Initialized client
        origin: Known place alias or free text (e.g., "savidor")
        destination: Known place alias or free text (e.g., "Dizengoff Center")
    """
    print(f"\n{'='*70}")
    print(f"Routes: {origin} -> {destination}")
    print(f"{'='*70}\n")

    def as_input(text):
        # known place names become aliases, anything else a text search
        return AliasInput(text) if client.registry.has(text) else TextInput(text)

    result = client.search_routes(as_input(origin), as_input(destination))
    if not result.itineraries:
        print("  No routes found")
        return

    for i, itinerary in enumerate(result.itineraries, 1):
        depart = itinerary.departure_time.strftime("%H:%M")
        arrive = itinerary.arrival_time.strftime("%H:%M")
        print(f"{i}. {depart} -> {arrive} ({itinerary.total_duration} min, "
              f"{itinerary.total_walking_distance} m walking)")
        for leg in itinerary.legs:
            if leg.type == "transit":
                print(f"     {leg.line.short_name or leg.line.id}: "
                      f"{leg.origin.name} -> {leg.destination.name} ({leg.num_stops} stops)")
            elif leg.type == "walk":
                print(f"     walk {leg.distance_in_meters} m")
            else:
                print(f"     {leg.type}")


def print_alerts(client: MoovitClient):
    print("\n" + "=" * 70)
    print("SERVICE ALERTS:")
    print("-" * 70)
    alerts = client.get_metro_alerts()
    if alerts:
        for alert in alerts[:10]:
            print(f"  [{alert.severity}] {alert.title}")
    else:
        print("  No service alerts")
    print("\n" + "=" * 70 + "\n")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: example.py ORIGIN DESTINATION")
        print('  e.g. example.py savidor "Dizengoff Center"')
        sys.exit(1)

    try:
        with MoovitClient(metro_id=1, language="EN") as client:
            print_routes(client, sys.argv[1], sys.argv[2])
            print_alerts(client)
    except MoovitError as e:
        logger.error(f"Failed to fetch data: {e}", exc_info=True)
        print(f"Error: {e}")
        sys.exit(1)

import argparse
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass

import pandas as pd
import requests

log = logging.getLogger(__name__)

BASE_URL = "https://pokeapi.co/api/v2"

ALL_FIELDS = "all"
FIELDS = ("Name", "Type", "Power", "Accuracy", "PP", "Class")


class MoveFetcherError(Exception):
    """Base class for move fetcher errors"""
    pass


class NotFoundError(MoveFetcherError, LookupError):
    """Raised when the API has no resource for an identifier"""

    def __init__(self, identifier, url):
        super().__init__(f"No resource found for {identifier!r} ({url})")
        self.identifier = identifier
        self.url = url


class UsageError(MoveFetcherError, ValueError):
    """Raised when a caller passes arguments outside the allowed values"""
    pass


@dataclass(frozen=True)
class MoveRecord:
    Name: str
    Type: str
    Power: int
    Accuracy: int
    PP: int
    Class: str


@dataclass(frozen=True)
class Creature:
    id: int
    name: str
    types: tuple
    moves: tuple  # move-detail urls, in the order the API lists them


@dataclass(frozen=True)
class Moveset:
    creature: Creature
    records: tuple


def resolve_fields(fields=ALL_FIELDS):
    """
    Turns the `fields` argument into a tuple of column names in canonical order.
    Accepts "all", a single column name, or any collection of column names.
    """
    if isinstance(fields, str):
        if fields.lower() == ALL_FIELDS:
            return FIELDS
        fields = [fields]

    try:
        requested = set(fields)
    except TypeError:
        raise UsageError(f"fields must be 'all' or a collection of {list(FIELDS)}, got {fields!r}")

    if not requested:
        raise UsageError(f"fields must name at least one of {list(FIELDS)}")

    invalid = requested.difference(FIELDS)
    if invalid:
        raise UsageError(f"Invalid fields {sorted(invalid, key=str)}; choose from {list(FIELDS)} or 'all'")

    return tuple(f for f in FIELDS if f in requested)


def primary_value(value):
    """
    The API models type and damage class as a named reference
    ({"name": ..., "url": ...}); older shapes use a list of them.
    Lists collapse to their first entry, references to their name.
    """
    if isinstance(value, list):
        if not value:
            return None
        value = value[0]
    if isinstance(value, dict):
        return value.get("name")
    return value


def normalize_move(payload):
    power = payload.get("power")
    accuracy = payload.get("accuracy")
    pp = payload.get("pp")
    return MoveRecord(
        Name=payload["name"],
        Type=primary_value(payload["type"]),
        Power=0 if power is None else int(power),
        # no accuracy means the move cannot miss
        Accuracy=100 if accuracy is None else int(accuracy),
        PP=0 if pp is None else int(pp),
        Class=primary_value(payload["damage_class"]),
    )


def get_json(url, identifier, session=None):
    http = session if session is not None else requests
    resp = http.get(url)
    if resp.status_code == 404:
        raise NotFoundError(identifier, url)
    resp.raise_for_status()
    return resp.json()


def fetch_creature(identifier, session=None):
    if isinstance(identifier, str):
        identifier = identifier.lower()

    url = f"{BASE_URL}/pokemon/{identifier}"
    log.info("Requesting %s", url)
    data = get_json(url, identifier, session)

    try:
        slots = sorted(data.get("types", []), key=lambda t: t.get("slot", 0))
        return Creature(
            id=data["id"],
            name=data["name"],
            types=tuple(primary_value(t["type"]) for t in slots),
            moves=tuple(m["move"]["url"] for m in data["moves"]),
        )
    except KeyError as e:
        log.error("Unexpected creature JSON from %s: missing key %s", url, e)
        raise


def fetch_move(url, session=None):
    log.debug("Requesting %s", url)
    data = get_json(url, url, session)
    try:
        return normalize_move(data)
    except KeyError as e:
        log.error("Unexpected move JSON from %s: missing key %s", url, e)
        raise


def fetch_moveset(identifier, session=None, workers=1):
    if workers < 1:
        raise UsageError(f"workers must be at least 1, got {workers}")

    creature = fetch_creature(identifier, session)

    if workers == 1 or len(creature.moves) < 2:
        records = [fetch_move(url, session) for url in creature.moves]
    else:
        # map() yields results in submission order
        with ThreadPoolExecutor(max_workers=workers) as pool:
            records = list(pool.map(lambda url: fetch_move(url, session), creature.moves))

    log.info("Fetched %d moves for %s", len(records), creature.name)
    return Moveset(creature=creature, records=tuple(records))


def records_to_frame(records, columns=FIELDS):
    df = pd.DataFrame([asdict(r) for r in records], columns=list(FIELDS))
    df = df.astype({"Power": "int64", "Accuracy": "int64", "PP": "int64"})
    return df[list(columns)]


def fetch_moves(identifier, fields=ALL_FIELDS, session=None, workers=1):
    """
    Fetch every move a creature can learn as a DataFrame, one row per move
    in the order the API lists them. `fields` is "all" or a subset of
    FIELDS; the columns always come back in FIELDS order.

    Raises UsageError for bad `fields` before any request is made and
    NotFoundError when the identifier does not resolve.
    """
    columns = resolve_fields(fields)
    moveset = fetch_moveset(identifier, session=session, workers=workers)
    return records_to_frame(moveset.records, columns)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Fetch a creature's moves from PokeAPI and save them as JSON.")
    parser.add_argument("identifier", help="creature name or national dex number")
    parser.add_argument("--fields", nargs="+", default=[ALL_FIELDS], help=f"columns to keep, from {list(FIELDS)}")
    parser.add_argument("--workers", type=int, default=1, help="parallel move-detail requests")
    parser.add_argument("--output", help="output JSON file (default: <name>_moves.json)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    identifier = int(args.identifier) if args.identifier.isdigit() else args.identifier
    fields = args.fields[0] if len(args.fields) == 1 else args.fields

    print(f"Fetching moves for {identifier} from PokeAPI...")
    df = fetch_moves(identifier, fields=fields, workers=args.workers)
    print(f"Fetched {len(df)} moves.")

    output_file = args.output or f"{str(identifier).lower()}_moves.json"
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(df.to_dict(orient="records"), f, indent=2, ensure_ascii=False)

    print(f"Saved dataset to {output_file}")
    return output_file


if __name__ == "__main__":
    main()

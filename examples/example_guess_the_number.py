from pathlib import Path

from rich.console import Console

from inkscale.orchestration.batch import decode_jsonl
from inkscale.routing.contracts import load_contracts

EXAMPLES_ROOT = Path(__file__).parent
assert EXAMPLES_ROOT.name == "examples"
DATA = EXAMPLES_ROOT / "guess_the_number"

CONTRACTS = DATA / "contracts.json"
LOGS = DATA / "logs.jsonl"
assert CONTRACTS.is_file() and LOGS.is_file()

console = Console()


def main():
    registry = load_contracts(CONTRACTS)["guess_the_number"]
    result = decode_jsonl(LOGS, registry)

    for item in result.events:
        console.print(f"[bold]{item.log.block_number}[/] {item.event.event_type}", item.event.data)

    # Route a single log by hand: address + block height -> version -> decoder
    entry = registry.resolve("0xe75cbd47620dbb2053cf2a98d06840f06baaf141", 1934800)
    console.print(f"resolved version: {entry.version} (from={entry.from_block}, to={entry.to_block})")
    console.print(result.stats)


if __name__ == "__main__":
    main()

"""Shared constants and topic builders for the test suite."""

CONTRACT_ADDRESS = "0xe75cbd47620dbb2053cf2a98d06840f06baaf141"

NEW_GAME_SIG = "0xc8a7c5d86cdaf43555273e08a00e4cdaa93cf22046685231d5eb1b6c0d29fa92"
GUESS_MADE_SIG = "0xbfe3e4de23c556408a7c400baf6b27364bdb763595ac8f3547c20db70131083a"
CLUE_GIVEN_SIG = "0xd30c753e3012d98d428abde3eebaae62a09d7d043d8018f1ecb4e6c5d3dc9429"
MESSAGE_QUEUED_SIG = "0xcfd8f7cee62376e0a894a1c5d124ec219dc678fd742bcb7f183455a362744aa1"
ROLE_GRANTED_SIG = "0x9fcfc0869a89de6464b06891fcfa026e1ac809ce01300cd76a342e696297dd20"
SHAPES_SIG = "0x" + "ab" * 32


def u128_topic(value: int) -> str:
    """Integer topic: little-endian from byte 0, zero padded to 32 bytes."""
    return "0x" + value.to_bytes(32, "little").hex()


def address_topic(address: str) -> str:
    """Address topic: right-aligned in 32 bytes."""
    return "0x" + "00" * 12 + address[2:]

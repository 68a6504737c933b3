"""Tests for fence stripping and decoding model output."""

import json

import pytest

from nebula_arcade.decoder import decode, decode_batch, strip_fences
from nebula_arcade.errors import MalformedResponse
from nebula_arcade.models import (
    AlchemyCombination,
    ArenaCombatVerdict,
    ArenaCreature,
    CipherPuzzle,
    Dilemma,
    EmojiPuzzle,
    WordLadderEndpoints,
    WordLadderStepVerdict,
)

SAMPLES = [
    AlchemyCombination(name="Steam", emoji="💨"),
    EmojiPuzzle(emojis="🚢🧊💔", answer="Titanic", hints=["1997", "A ship", "Jack", "Iceberg", "King of the world"]),
    Dilemma(
        title="Fly or vanish", description="Choose a power.",
        option_a="Fly", option_b="Be invisible",
        consequence_a="Birds hate you.", consequence_b="Nobody waits for you.",
    ),
    WordLadderEndpoints(start_word="Sol", end_word="Noite", start_emoji="☀️", end_emoji="🌙"),
    WordLadderStepVerdict(is_valid=True, message="Sun and moon share the sky.", emoji="🌕", proximity=80),
    WordLadderStepVerdict(is_valid=False, message="Unrelated."),
    CipherPuzzle(original="Carpe diem", encrypted="Mied eprac", rule="Reversed", category="Latin"),
    ArenaCreature(creature="Lava Golem", emoji="🌋", description="Hot. Slow.", difficulty_tier="Hard"),
    ArenaCombatVerdict(success=False, commentary="You melted.", survival_chance=5, damage_dealt=10),
]


@pytest.mark.parametrize("item", SAMPLES, ids=lambda item: type(item).__name__)
def test_decode_every_variant(item):
    raw = json.dumps(item.to_json_dict(), ensure_ascii=False)
    assert decode(raw, type(item)) == item
    assert decode(f"```json\n{raw}\n```", type(item)) == item


def test_decode_batch():
    items = [
        CipherPuzzle(original="Carpe diem", encrypted="Mied eprac", rule="Reversed", category="Latin"),
        CipherPuzzle(original="Veni vidi vici", encrypted="Inev", rule="Reversed", category="Latin"),
    ]
    raw = json.dumps([i.to_json_dict() for i in items])
    assert decode_batch(raw, CipherPuzzle) == items


# ── fences ───────────────────────────────────────────────────


@pytest.mark.parametrize("raw", [
    '{"name": "Mud", "emoji": "🟫"}',
    '```json\n{"name": "Mud", "emoji": "🟫"}\n```',
    '```\n{"name": "Mud", "emoji": "🟫"}\n```',
    '  ```json\n{"name": "Mud", "emoji": "🟫"}```  ',
    '```json {"name": "Mud", "emoji": "🟫"}```',
])
def test_fenced_output_decodes(raw):
    assert decode(raw, AlchemyCombination) == AlchemyCombination(name="Mud", emoji="🟫")


def test_strip_fences_leaves_plain_text():
    assert strip_fences('  [1, 2]  ') == "[1, 2]"


# ── malformed ────────────────────────────────────────────────


@pytest.mark.parametrize("raw", ["", "   ", "```json\n```"])
def test_empty_output(raw):
    with pytest.raises(MalformedResponse, match="empty"):
        decode(raw, AlchemyCombination)


def test_invalid_json():
    with pytest.raises(MalformedResponse, match="invalid JSON"):
        decode('{"name": "Mud"', AlchemyCombination)


def test_missing_field():
    with pytest.raises(MalformedResponse, match="AlchemyCombination"):
        decode('{"name": "Mud"}', AlchemyCombination)


def test_array_where_object_expected():
    with pytest.raises(MalformedResponse):
        decode('[{"name": "Mud", "emoji": "🟫"}]', AlchemyCombination)


def test_object_where_array_expected():
    with pytest.raises(MalformedResponse):
        decode_batch('{"original": "x"}', CipherPuzzle)


def test_one_bad_element_rejects_batch():
    raw = json.dumps([
        {"original": "Carpe diem", "encrypted": "x", "rule": "r", "category": "c"},
        {"original": "Veni vidi vici"},
    ])
    with pytest.raises(MalformedResponse):
        decode_batch(raw, CipherPuzzle)


def test_blank_identity_rejects_batch():
    raw = json.dumps([{"creature": "   ", "emoji": "🌋", "description": "x", "difficultyTier": "Hard"}])
    with pytest.raises(MalformedResponse, match="ArenaCreature"):
        decode_batch(raw, ArenaCreature)

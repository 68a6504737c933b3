"""Prompt building: Handlebars instruction text plus a response schema per kind.

Each prompt kind pairs a compact instruction template with the exact JSON
shape the model must return (Gemini's OpenAPI-subset schema). Batch kinds
ask for an array of `count` items and list recent history as exclusions.
Only the most recent `exclude_limit` entries reach the prompt: the `last`
helper trims them, trading perfect de-duplication for token cost. The local
history filter in the prefetch queue catches whatever slips through.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Literal

import pybars

from nebula_arcade.models import (
    AlchemyCombination,
    ArenaCombatVerdict,
    ArenaCreature,
    CipherPuzzle,
    ContentItem,
    Dilemma,
    EmojiPuzzle,
    Language,
    PromptSpec,
    WordLadderEndpoints,
    WordLadderStepVerdict,
)

PromptKind = Literal[
    "alchemy_combine",
    "emoji_batch",
    "dilemma_batch",
    "ladder_endpoints",
    "ladder_step",
    "cipher_batch",
    "arena_creatures",
    "arena_combat",
]

DEFAULT_EXCLUDE_LIMIT = 20
MAX_BATCH_COUNT = 10

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised for an unknown prompt kind, missing parameters or a template failure."""


# ── Handlebars helpers ───────────────────────────────────


def _helper_last(this, options, items, count):
    """{{#last array N}}...{{/last}} — iterate over the last N items."""
    count = int(count)
    if count <= 0:
        return []
    result = []
    for item in list(items or [])[-count:]:
        result.extend(options["fn"](item))
    return result


_HELPERS: dict[str, Callable] = {
    "last": _helper_last,
}


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return compiled(context, helpers=_HELPERS)
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


# ── Schema helpers ───────────────────────────────────────

_STRING = {"type": "STRING"}
_BOOLEAN = {"type": "BOOLEAN"}
_PERCENT = {"type": "INTEGER", "minimum": 0, "maximum": 100}


def _object(properties: dict[str, dict], optional: Iterable[str] = ()) -> dict:
    skip = set(optional)
    return {
        "type": "OBJECT",
        "properties": properties,
        "required": [name for name in properties if name not in skip],
    }


# ── Templates ────────────────────────────────────────────

ALCHEMY_COMBINE = """\
Act as the logic engine of an "Infinite Craft" style game.
Combine two elements into ONE new element: "{{{first}}}" + "{{{second}}}".
Rules: answer with a single noun or a standard compound noun ("Steam", "Mud", "Black Hole"). \
Keep it simple and grounded in real objects, nature, science or very famous pop culture. \
Common results are fine; do not force uniqueness.
Examples: Fire + Water = Steam; Wind + Earth = Dust; Human + Robot = Cyborg; Ocean + Ice = Iceberg; Tree + Fire = Ash.
Language: {{language}}.
Return JSON with "name" (the new element) and "emoji" (one representative emoji)."""

EMOJI_BATCH = """\
Pick {{count}} different WORLD FAMOUS movie, video game or book titles that anyone would recognise \
(Marvel, Disney, Star Wars, Harry Potter, Titanic, GTA, Mario). No obscure titles.
{{#if exclude}}Do NOT use any of these: {{#last exclude limit}}"{{{this}}}" {{/last}}
{{/if}}Represent each title with 2 to 5 emojis.
Return a JSON array. Each item has "answer" (the title in {{language}}), "emojis", and "hints": \
exactly 5 strings in {{language}}, from vague to give-away \
(genre/year, plot theme, main character, famous scene or director, famous quote)."""

DILEMMA_BATCH = """\
Create {{count}} funny, absurd or philosophical "Would You Rather" scenarios. Each must be a hard or hilarious choice.
{{#if exclude}}Do NOT reuse these titles: {{#last exclude limit}}"{{{this}}}" {{/last}}
{{/if}}Language: {{language}}.
Return a JSON array. Each item has "title", "description", "optionA", "optionB", \
"consequenceA" and "consequenceB" (a short funny prediction of what happens after each choice)."""

LADDER_ENDPOINTS = """\
Create {{count}} challenges for a word-association chain game. Each has a start word and a distant \
but reachable target word (3 to 6 association steps apart), both common concrete nouns in {{language}}.
{{#if exclude}}Do NOT reuse these pairs: {{#last exclude limit}}"{{{this}}}" {{/last}}
{{/if}}Return a JSON array. Each item has "startWord", "endWord", "startEmoji" and "endEmoji"."""

LADDER_STEP = """\
You judge a word-association chain game.
Current word: "{{{current}}}". Target word: "{{{target}}}". Proposed next word: "{{{guess}}}".
The step is valid when the proposed word is clearly associated with the current word \
(meaning, category, common expression, cultural link). Reject unrelated words and repeats.
Rate how close the proposed word is to the target from 0 (unrelated) to 100 (practically the target).
Language for the message: {{language}}.
Return JSON with "isValid", "message" (one short sentence explaining the verdict), \
"emoji" (one emoji for the proposed word) and "proximity"."""

CIPHER_BATCH = """\
Create {{count}} puzzles for a decoding game. Each hides a well-known phrase, proverb, movie quote or title \
("original", in {{language}}) transformed by ONE simple logical rule \
(reversed words, shifted letters, swapped vowels, words in reverse order) into "encrypted".
{{#if exclude}}Do NOT use any of these phrases: {{#last exclude limit}}"{{{this}}}" {{/last}}
{{/if}}Return a JSON array. Each item has "original", "encrypted", "rule" \
(one short sentence describing the transformation, in {{language}}) and "category"."""

ARENA_CREATURES = """\
Invent {{count}} creatures for a survival arena game: monsters, mythical beasts or absurd foes.
{{#if exclude}}Do NOT reuse these creatures: {{#last exclude limit}}"{{{this}}}" {{/last}}
{{/if}}Language: {{language}}.
Return a JSON array. Each item has "creature" (name), "emoji", "description" (two vivid sentences) \
and "difficultyTier" (one of Easy, Medium, Hard, Legendary)."""

ARENA_COMBAT = """\
You are the referee of a survival arena. The player faces "{{{creature}}}" with this strategy:
"{{{strategy}}}"
Judge how well the strategy would work against this creature. Be fair, creative and a bit dramatic.
Language: {{language}}.
Return JSON with "success", "commentary" (2 to 3 sentences narrating the fight), \
"survivalChance" (0-100) and "damageDealt" (0-100)."""


@dataclass(frozen=True)
class PromptTemplate:
    text: str
    schema: dict
    item_model: type[ContentItem]
    params: tuple[str, ...] = ()
    batch: bool = False


TEMPLATES: dict[str, PromptTemplate] = {
    "alchemy_combine": PromptTemplate(
        text=ALCHEMY_COMBINE,
        schema=_object({"name": _STRING, "emoji": _STRING}),
        item_model=AlchemyCombination,
        params=("first", "second"),
    ),
    "emoji_batch": PromptTemplate(
        text=EMOJI_BATCH,
        schema=_object({
            "answer": _STRING,
            "emojis": _STRING,
            "hints": {"type": "ARRAY", "items": _STRING, "minItems": 5, "maxItems": 5},
        }),
        item_model=EmojiPuzzle,
        batch=True,
    ),
    "dilemma_batch": PromptTemplate(
        text=DILEMMA_BATCH,
        schema=_object({
            "title": _STRING,
            "description": _STRING,
            "optionA": _STRING,
            "optionB": _STRING,
            "consequenceA": _STRING,
            "consequenceB": _STRING,
        }),
        item_model=Dilemma,
        batch=True,
    ),
    "ladder_endpoints": PromptTemplate(
        text=LADDER_ENDPOINTS,
        schema=_object({
            "startWord": _STRING,
            "endWord": _STRING,
            "startEmoji": _STRING,
            "endEmoji": _STRING,
        }),
        item_model=WordLadderEndpoints,
        batch=True,
    ),
    "ladder_step": PromptTemplate(
        text=LADDER_STEP,
        schema=_object(
            {
                "isValid": _BOOLEAN,
                "message": _STRING,
                "emoji": _STRING,
                "proximity": _PERCENT,
            },
            optional=("emoji", "proximity"),
        ),
        item_model=WordLadderStepVerdict,
        params=("current", "target", "guess"),
    ),
    "cipher_batch": PromptTemplate(
        text=CIPHER_BATCH,
        schema=_object({
            "original": _STRING,
            "encrypted": _STRING,
            "rule": _STRING,
            "category": _STRING,
        }),
        item_model=CipherPuzzle,
        batch=True,
    ),
    "arena_creatures": PromptTemplate(
        text=ARENA_CREATURES,
        schema=_object({
            "creature": _STRING,
            "emoji": _STRING,
            "description": _STRING,
            "difficultyTier": {
                "type": "STRING",
                "enum": ["Easy", "Medium", "Hard", "Legendary"],
            },
        }),
        item_model=ArenaCreature,
        batch=True,
    ),
    "arena_combat": PromptTemplate(
        text=ARENA_COMBAT,
        schema=_object({
            "success": _BOOLEAN,
            "commentary": _STRING,
            "survivalChance": _PERCENT,
            "damageDealt": _PERCENT,
        }),
        item_model=ArenaCombatVerdict,
        params=("creature", "strategy"),
    ),
}


def _template(kind: str) -> PromptTemplate:
    template = TEMPLATES.get(kind)
    if template is None:
        raise PromptError(f"Unknown prompt kind {kind!r}")
    return template


def item_model(kind: str) -> type[ContentItem]:
    return _template(kind).item_model


def is_batch(kind: str) -> bool:
    return _template(kind).batch


def build_prompt(
    kind: str,
    params: dict[str, Any],
    locale: Language,
    exclude: Iterable[str] = (),
) -> PromptSpec:
    """Build the instruction text and response schema for one model call.

    Params by kind:
      batch kinds        count (1–10), optional exclude_limit
      alchemy_combine    first, second
      ladder_step        current, target, guess
      arena_combat       creature, strategy
    """
    template = _template(kind)

    missing = [p for p in template.params if not str(params.get(p, "")).strip()]
    if missing:
        raise PromptError(f"{kind}: missing parameter(s) {', '.join(missing)}")

    context: dict[str, Any] = {p: str(params[p]).strip() for p in template.params}
    context["language"] = locale

    schema = copy.deepcopy(template.schema)
    if template.batch:
        try:
            count = int(params.get("count", 0))
        except (TypeError, ValueError) as e:
            raise PromptError(f"{kind}: count must be an integer") from e
        if not 1 <= count <= MAX_BATCH_COUNT:
            raise PromptError(f"{kind}: count must be between 1 and {MAX_BATCH_COUNT}")
        context["count"] = str(count)
        context["exclude"] = [e for e in exclude if e]
        context["limit"] = int(params.get("exclude_limit", DEFAULT_EXCLUDE_LIMIT))
        schema = {"type": "ARRAY", "items": schema}

    text = render_prompt(template.text, context).strip()
    return PromptSpec(
        kind=kind,
        instruction_text=text,
        response_schema=schema,
        locale=locale,
    )

"""Tests for AI outfit suggestion: parsing, fallback and the stub path."""

import asyncio
import json

import openai
import pytest

from wardrobe.ai import AIServiceError, OutfitSuggester
from wardrobe.ai.prompts import build_outfit_prompt
from wardrobe.ai.stub import synthesize_outfits
from wardrobe.ai.suggest import is_capability_error
from wardrobe.models import ClosetItem


@pytest.fixture
def items():
    return [
        ClosetItem(id="recTop1", name="White Tee", category="Top", color="white"),
        ClosetItem(id="recTop2", name="Blue Shirt", category="Top", color="blue"),
        ClosetItem(id="recBot1", name="Chinos", category="Bottom", color="khaki"),
        ClosetItem(id="recShoe", name="Loafers", category="Shoes", color="brown"),
    ]


def outfits_json(*outfits) -> str:
    return json.dumps({"outfits": list(outfits)})


def run(suggester, items, **kwargs):
    kwargs.setdefault("occasion", "brunch")
    return asyncio.run(suggester.generate_outfits(items, **kwargs))


class TestInputValidation:
    def test_empty_occasion(self, items, openai_client_factory):
        suggester = OutfitSuggester(openai_client_factory())
        with pytest.raises(ValueError):
            run(suggester, items, occasion="  ")

    def test_no_items(self, openai_client_factory):
        with pytest.raises(ValueError):
            run(OutfitSuggester(openai_client_factory()), [])

    @pytest.mark.parametrize("top_k", [0, 6])
    def test_top_k_bounds(self, items, openai_client_factory, top_k):
        with pytest.raises(ValueError):
            run(OutfitSuggester(openai_client_factory()), items, top_k=top_k)


class TestParsing:
    def test_ids_and_names_resolved(self, items, openai_client_factory):
        text = outfits_json({
            "name": "Easy brunch",
            "items": ["recTop1", "chinos", "unknown piece"],
            "reasoning": "Relaxed",
            "palette": ["white", "khaki"],
        })
        suggester = OutfitSuggester(openai_client_factory(responses_text=text))

        outfits = run(suggester, items)

        assert len(outfits) == 1
        assert outfits[0].items == ["recTop1", "recBot1"]
        assert outfits[0].palette == ["white", "khaki"]

    def test_fenced_output(self, items, openai_client_factory):
        text = "```json\n" + outfits_json({"name": "A", "items": ["recShoe"]}) + "\n```"
        suggester = OutfitSuggester(openai_client_factory(responses_text=text))

        assert run(suggester, items)[0].items == ["recShoe"]

    def test_truncated_to_top_k(self, items, openai_client_factory):
        text = outfits_json(
            {"name": "A", "items": ["recTop1"]},
            {"name": "B", "items": ["recTop2"]},
            {"name": "C", "items": ["recBot1"]},
        )
        suggester = OutfitSuggester(openai_client_factory(responses_text=text))

        outfits = run(suggester, items, top_k=2)
        assert [o.name for o in outfits] == ["A", "B"]

    def test_outfits_without_known_items_dropped(self, items, openai_client_factory):
        text = outfits_json(
            {"name": "Ghost", "items": ["recNope"]},
            {"name": "Real", "items": ["recTop2"]},
        )
        suggester = OutfitSuggester(openai_client_factory(responses_text=text))

        assert [o.name for o in run(suggester, items)] == ["Real"]

    def test_non_list_items_skipped(self, items, openai_client_factory):
        text = outfits_json(
            {"name": "Bad", "items": 5},
            {"name": "Also bad", "items": "recTop1"},
            {"name": "Good", "items": ["recTop1"], "palette": 7},
        )
        suggester = OutfitSuggester(openai_client_factory(responses_text=text))

        outfits = run(suggester, items)

        assert [o.name for o in outfits] == ["Good"]
        assert outfits[0].palette == []

    def test_only_malformed_items_is_empty_outfits(self, items, openai_client_factory):
        text = outfits_json({"name": "x", "items": 5})
        suggester = OutfitSuggester(openai_client_factory(responses_text=text))

        with pytest.raises(AIServiceError) as exc_info:
            run(suggester, items)
        assert exc_info.value.error_code == "AI_EMPTY_OUTFITS"
        assert exc_info.value.status_code == 502

    def test_no_braces_is_parse_error(self, items, openai_client_factory):
        suggester = OutfitSuggester(openai_client_factory(responses_text="I cannot help"))

        with pytest.raises(AIServiceError) as exc_info:
            run(suggester, items)

        assert exc_info.value.error_code == "AI_JSON_PARSE_ERROR"
        assert exc_info.value.status_code == 502
        assert exc_info.value.details["raw"] == "I cannot help"

    def test_raw_snippet_truncated(self, items, openai_client_factory):
        suggester = OutfitSuggester(openai_client_factory(responses_text="x" * 5000))

        with pytest.raises(AIServiceError) as exc_info:
            run(suggester, items)
        assert len(exc_info.value.details["raw"]) == 400

    @pytest.mark.parametrize("text", ['{"outfits": []}', '{"other": 1}', '{"outfits": "none"}'])
    def test_empty_outfits(self, items, openai_client_factory, text):
        suggester = OutfitSuggester(openai_client_factory(responses_text=text))

        with pytest.raises(AIServiceError) as exc_info:
            run(suggester, items)
        assert exc_info.value.error_code == "AI_EMPTY_OUTFITS"


class TestFallback:
    def test_permission_denied_falls_back_to_chat(
        self, items, openai_client_factory, openai_error_factory
    ):
        client = openai_client_factory(
            responses_error=openai_error_factory(openai.PermissionDeniedError, 403),
            chat_text=outfits_json({"name": "Chat look", "items": ["recTop1"]}),
        )

        outfits = run(OutfitSuggester(client), items)

        assert outfits[0].name == "Chat look"
        client.responses.create.assert_awaited_once()
        client.chat.completions.create.assert_awaited_once()

    def test_unsupported_parameter_falls_back(
        self, items, openai_client_factory, openai_error_factory
    ):
        client = openai_client_factory(
            responses_error=openai_error_factory(
                openai.BadRequestError, 400, "Unsupported parameter: 'text.format'"
            ),
            chat_text=outfits_json({"name": "A", "items": ["recTop1"]}),
        )

        assert run(OutfitSuggester(client), items)[0].name == "A"

    def test_other_errors_do_not_fall_back(
        self, items, openai_client_factory, openai_error_factory
    ):
        client = openai_client_factory(
            responses_error=openai_error_factory(openai.InternalServerError, 500, "boom"),
            chat_text=outfits_json({"name": "A", "items": ["recTop1"]}),
        )

        with pytest.raises(AIServiceError) as exc_info:
            run(OutfitSuggester(client), items)

        assert exc_info.value.error_code == "OPENAI_ERROR"
        assert exc_info.value.status_code == 502
        client.chat.completions.create.assert_not_awaited()

    def test_rate_limit_maps_to_429(self, items, openai_client_factory, openai_error_factory):
        client = openai_client_factory(
            responses_error=openai_error_factory(openai.RateLimitError, 429, "slow down"),
        )

        with pytest.raises(AIServiceError) as exc_info:
            run(OutfitSuggester(client), items)
        assert exc_info.value.status_code == 429

    def test_both_fail_reports_both_details(
        self, items, openai_client_factory, openai_error_factory
    ):
        client = openai_client_factory(
            responses_error=openai_error_factory(openai.NotFoundError, 404, "no responses"),
            chat_error=openai_error_factory(openai.InternalServerError, 500, "chat down"),
        )

        with pytest.raises(AIServiceError) as exc_info:
            run(OutfitSuggester(client), items)

        error = exc_info.value
        assert error.error_code == "OPENAI_ERROR"
        assert "no responses" in error.details["detail"]
        assert "chat down" in error.details["fallback_detail"]

    def test_missing_client(self, items):
        with pytest.raises(AIServiceError) as exc_info:
            run(OutfitSuggester(None), items)
        assert exc_info.value.error_code == "OPENAI_ERROR"

    def test_capability_predicate(self, openai_error_factory):
        assert is_capability_error(openai_error_factory(openai.PermissionDeniedError, 403))
        assert is_capability_error(openai_error_factory(openai.NotFoundError, 404))
        assert not is_capability_error(openai_error_factory(openai.BadRequestError, 400, "bad"))
        assert not is_capability_error(RuntimeError("x"))


class TestStub:
    def test_stub_never_calls_client(self, items, openai_client_factory):
        client = openai_client_factory()
        outfits = run(OutfitSuggester(client, stub=True), items, top_k=3)

        client.responses.create.assert_not_awaited()
        # Two tops means at most two distinct outfits
        assert len(outfits) == 2
        assert outfits[0].items == ["recTop1", "recBot1", "recShoe"]
        assert outfits[1].items == ["recTop2", "recBot1", "recShoe"]

    def test_synthesize_respects_top_k(self, items):
        outfits = synthesize_outfits(items, "work", top_k=1)
        assert len(outfits) == 1
        assert outfits[0].name == "work look 1"
        assert outfits[0].palette == ["white", "khaki", "brown"]


class TestPrompt:
    def test_prompt_lists_items_and_constraints(self, items):
        prompt = build_outfit_prompt(items, "wedding", "rainy", "classic", 2, dare=False)
        assert "recTop1" in prompt
        assert "wedding" in prompt
        assert "rainy" in prompt

    def test_dare_changes_prompt(self, items):
        plain = build_outfit_prompt(items, "party", None, None, 1, dare=False)
        dared = build_outfit_prompt(items, "party", None, None, 1, dare=True)
        assert plain != dared


def test_installed_client_ships_responses_api():
    client = openai.AsyncOpenAI(api_key="sk-test")

    assert callable(getattr(client.responses, "create", None))
    assert callable(client.chat.completions.create)

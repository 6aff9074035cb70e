"""Unit tests for placeholder parsing and local template filling."""

from datetime import datetime

import pytest

from transparent_trust.core.templating import (
    TemplateFillContext,
    build_llm_fill_prompt,
    extract_placeholder_hints,
    fill_template,
    format_value,
    get_nested_value,
    parse_placeholders,
)

NOW = datetime(2024, 3, 5, 14, 7)


class TestParsePlaceholders:
    def test_parses_dot_and_colon_forms(self):
        placeholders = parse_placeholders("Hi {{customer.name}}, {{llm:write an intro}}!")

        assert [(p.type, p.field) for p in placeholders] == [
            ("customer", "name"),
            ("llm", "write an intro"),
        ]
        assert placeholders[0].full_match == "{{customer.name}}"

    def test_type_is_lowercased_and_field_trimmed(self):
        (placeholder,) = parse_placeholders("{{Customer. industry }}")
        assert placeholder.type == "customer"
        assert placeholder.field == "industry"

    def test_text_without_placeholders(self):
        assert parse_placeholders("no placeholders {here}") == []


class TestValueHelpers:
    def test_get_nested_value_walks_dicts_and_lists(self):
        data = {"a": {"b": [{"c": 1}, {"c": 2}]}}
        assert get_nested_value(data, "a.b.1.c") == 2
        assert get_nested_value(data, "a.x.c") is None
        assert get_nested_value(data, "a.b.5") is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, ""),
            ("text", "text"),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            (2.5, "2.5"),
            (["a", "b"], "a, b"),
        ],
    )
    def test_format_value(self, value, expected):
        assert format_value(value) == expected

    def test_format_value_dict_is_json(self):
        assert format_value({"k": 1}) == '{\n  "k": 1\n}'


class TestFillTemplate:
    def test_customer_fields(self):
        context = TemplateFillContext(customer={"name": "Acme", "profile": {"size": "Large"}})
        result = fill_template("{{customer.name}} is {{customer.profile.size}}", context)

        assert result.content == "Acme is Large"
        assert result.placeholders_resolved == ["{{customer.name}}", "{{customer.profile.size}}"]
        assert result.placeholders_missing == []

    def test_missing_values_are_removed_and_reported(self):
        result = fill_template("A{{customer.name}}B{{custom.tagline}}C", TemplateFillContext())

        assert result.content == "ABC"
        assert result.placeholders_missing == ["{{customer.name}}", "{{custom.tagline}}"]

    def test_unknown_type_resolves_empty(self):
        result = fill_template("x{{weather.today}}y", TemplateFillContext())
        assert result.content == "xy"
        assert result.placeholders_missing == ["{{weather.today}}"]

    @pytest.mark.parametrize(
        "field,expected",
        [
            ("today", "March 5, 2024"),
            ("now", "March 5, 2024 14:07"),
            ("year", "2024"),
            ("month", "March"),
            ("quarter", "Q1"),
            ("iso", "2024-03-05T14:07:00"),
        ],
    )
    def test_date_placeholders(self, field, expected):
        result = fill_template(f"{{{{date.{field}}}}}", TemplateFillContext(now=NOW))
        assert result.content == expected

    def test_skill_placeholders(self):
        skills = [
            {"title": "SSO", "content": "We support SAML."},
            {"title": "Encryption", "content": "AES-256 at rest."},
        ]
        context = TemplateFillContext(skills=skills)

        assert fill_template("{{skill.titles}}", context).content == "SSO, Encryption"
        assert fill_template("{{skill.all}}", context).content == "We support SAML.\n\n---\n\nAES-256 at rest."
        assert fill_template("{{skill.1.title}}", context).content == "Encryption"
        assert fill_template("{{skill.7.title}}", context).content == ""

    def test_gtm_summaries(self):
        gtm = {
            "gong_calls": [{"title": "Discovery", "date": "2024-01-02", "summary": None}],
            "hubspot_activities": [{"type": "EMAIL", "subject": "Pricing", "date": "2024-01-03"}],
            "looker_metrics": [{"period": "Q4", "metrics": {"arr": 100, "seats": 20}}],
            "owner": "Dana",
        }
        context = TemplateFillContext(gtm=gtm)

        assert fill_template("{{gtm.recent_calls_summary}}", context).content == "- Discovery (2024-01-02): No summary"
        assert fill_template("{{gtm.recent_activities}}", context).content == "- EMAIL: Pricing (2024-01-03)"
        assert fill_template("{{gtm.metrics_summary}}", context).content == "Q4: arr: 100, seats: 20"
        assert fill_template("{{gtm.owner}}", context).content == "Dana"

    def test_custom_values(self):
        context = TemplateFillContext(custom={"tagline": "Trust, verified"})
        assert fill_template("{{custom.tagline}}", context).content == "Trust, verified"

    def test_llm_placeholders_are_left_for_generation(self):
        result = fill_template("Intro: {{llm:summarize the customer}}", TemplateFillContext())

        assert result.content == "Intro: {{llm:summarize the customer}}"
        assert [p.field for p in result.llm_placeholders] == ["summarize the customer"]
        assert result.placeholders_missing == []

    def test_repeated_placeholder_is_replaced_each_time(self):
        context = TemplateFillContext(customer={"name": "Acme"})
        result = fill_template("{{customer.name}} and {{customer.name}}", context)
        assert result.content == "Acme and Acme"


class TestPrompts:
    def test_llm_fill_prompt_lists_placeholders_and_context(self):
        context = TemplateFillContext(
            customer={"name": "Acme", "industry": "Fintech", "content": "Payments company"},
            skills=[{"title": "SSO"}],
        )
        placeholders = parse_placeholders("{{llm:write intro}}")
        prompt = build_llm_fill_prompt("Body {{llm:write intro}}", placeholders, context, "Keep it short")

        assert "1. {{llm:write intro}} - write intro" in prompt
        assert "Customer: Acme (Fintech)" in prompt
        assert "Customer Overview:\nPayments company" in prompt
        assert "Skills Available: SSO" in prompt
        assert "## Additional Instructions\nKeep it short" in prompt
        assert prompt.index("## Partially Filled Template") < prompt.index("## Instructions\n")

    def test_prompt_without_context(self):
        prompt = build_llm_fill_prompt("x", [], TemplateFillContext())
        assert "No additional context provided." in prompt
        assert "Additional Instructions" not in prompt

    def test_placeholder_hints(self):
        hints = extract_placeholder_hints("{{customer.name}} {{llm:intro}} {{custom.x}} {{other.y}}")
        assert hints == {
            "{{customer.name}}": "Customer field: name",
            "{{llm:intro}}": "LLM will generate: intro",
            "{{custom.x}}": "Custom value: x (user-provided)",
        }

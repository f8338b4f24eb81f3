import asyncio
import json

import httpx

from meetscribe.enrichment.controller import EnrichmentController
from meetscribe.enrichment.formatting import error_fragment, format_for_display
from meetscribe.enrichment.local import LocalExtractiveEnricher, split_sentences
from meetscribe.enrichment.openai_compat import OpenAICompatEnricher
from meetscribe.internal_core.errors import EnrichmentError
from meetscribe.internal_core.notifications import NotificationSink


def test_blank_transcript_reports_and_skips_service(enricher) -> None:
    sink = NotificationSink()
    controller = EnrichmentController(enricher, sink)

    assert asyncio.run(controller.enrich("   ", "summarize")) is None

    assert enricher.calls == []
    assert controller.result is None
    assert sink.current.title == "Text required"


def test_unknown_kind_is_reported(enricher) -> None:
    sink = NotificationSink()
    controller = EnrichmentController(enricher, sink)

    assert asyncio.run(controller.enrich("text", "translate")) is None
    assert enricher.calls == []
    assert sink.current.title == "AI problem"


def test_pending_then_ready_with_display_markup(enricher) -> None:
    sink = NotificationSink()
    controller = EnrichmentController(enricher, sink)
    seen = []
    controller.add_listener(lambda result: seen.append(result.status if result else None))

    async def scenario():
        task = asyncio.create_task(controller.enrich("កិច្ចប្រជុំបានចប់។", "summarize"))
        await asyncio.sleep(0)
        assert controller.is_loading
        assert controller.result.label == "Meeting Summary"
        assert controller.result.content == ""
        enricher.pending[0].set_result("**Summary**: meeting ended <script>x</script>")
        return await task

    result = asyncio.run(scenario())

    assert result.status == "ready"
    assert result.label == "Meeting Summary"
    assert "<strong>Summary</strong>" in result.content
    assert "<script>" not in result.content
    assert "&lt;script&gt;" in result.content
    assert enricher.calls == [("summarize", "កិច្ចប្រជុំបានចប់។")]
    assert seen == ["pending", "ready"]
    assert sink.current is None


def test_action_items_use_their_own_label(enricher) -> None:
    enricher.reply = "- call vendor"
    controller = EnrichmentController(enricher, NotificationSink())

    result = asyncio.run(controller.enrich("we will call the vendor", "action_items"))

    assert result.label == "Action Items"
    assert result.content == "<ul><li>call vendor</li></ul>"
    assert enricher.calls[0][0] == "action_items"


def test_failure_yields_failed_result_and_one_notice(enricher) -> None:
    sink = NotificationSink()
    controller = EnrichmentController(enricher, sink)
    notices = []
    sink.add_listener(lambda notice: notices.append(notice))

    async def scenario():
        task = asyncio.create_task(controller.enrich("text", "summarize"))
        await asyncio.sleep(0)
        enricher.pending[0].set_exception(EnrichmentError("quota exceeded", code="external_http_429"))
        return await task

    result = asyncio.run(scenario())

    assert result.status == "failed"
    assert result.content == error_fragment("quota exceeded")
    assert not controller.is_loading
    assert [n.title for n in notices if n is not None] == ["AI problem"]
    assert "quota exceeded" in sink.current.message


def test_newer_request_wins_over_late_older_completion(enricher) -> None:
    controller = EnrichmentController(enricher, NotificationSink())

    async def scenario():
        first = asyncio.create_task(controller.enrich("text", "summarize"))
        await asyncio.sleep(0)
        second = asyncio.create_task(controller.enrich("text", "action_items"))
        await asyncio.sleep(0)
        enricher.pending[1].set_result("- B")
        second_result = await second
        enricher.pending[0].set_result("A")
        first_result = await first
        return first_result, second_result

    first_result, second_result = asyncio.run(scenario())

    assert first_result is None
    assert second_result.content == "<ul><li>B</li></ul>"
    assert controller.result.kind == "action_items"
    assert controller.result.status == "ready"


def test_late_failure_after_discard_is_silent(enricher) -> None:
    sink = NotificationSink()
    controller = EnrichmentController(enricher, sink)

    async def scenario():
        task = asyncio.create_task(controller.enrich("text", "summarize"))
        await asyncio.sleep(0)
        controller.discard()
        enricher.pending[0].set_exception(EnrichmentError("boom"))
        return await task

    assert asyncio.run(scenario()) is None
    assert controller.result is None
    assert sink.current is None


def test_replacing_request_shows_new_pending_and_drops_late_failure(enricher) -> None:
    sink = NotificationSink()
    controller = EnrichmentController(enricher, sink)

    async def scenario():
        first = asyncio.create_task(controller.enrich("text", "summarize"))
        await asyncio.sleep(0)
        second = asyncio.create_task(controller.enrich("text", "action_items"))
        await asyncio.sleep(0)
        replaced = controller.result
        enricher.pending[0].set_exception(EnrichmentError("too slow"))
        first_result = await first
        after_failure = controller.result
        enricher.pending[1].set_result("- B")
        await second
        return replaced, first_result, after_failure

    replaced, first_result, after_failure = asyncio.run(scenario())

    assert (replaced.kind, replaced.label, replaced.status) == ("action_items", "Action Items", "pending")
    assert first_result is None
    assert (after_failure.kind, after_failure.status) == ("action_items", "pending")
    assert sink.current is None
    assert controller.result.status == "ready"


def test_format_for_display_handles_headings_lists_and_paragraphs() -> None:
    raw = "# Overview\nFirst line\nsecond line\n\n1. one\n2. two\n\n<b>tail</b>"
    assert format_for_display(raw) == (
        "<h4>Overview</h4>"
        "<p>First line<br>second line</p>"
        "<ol><li>one</li><li>two</li></ol>"
        "<p>&lt;b&gt;tail&lt;/b&gt;</p>"
    )
    assert format_for_display("   ") == ""


def test_split_sentences_understands_khmer_punctuation() -> None:
    assert split_sentences("ជំរាបសួរ។ យើងនឹងជួបគ្នា៕ Done.") == ["ជំរាបសួរ។", "យើងនឹងជួបគ្នា៕", "Done."]


def test_local_enricher_is_extractive() -> None:
    service = LocalExtractiveEnricher(max_sentences=2)
    transcript = "We reviewed the budget. Anna will send the report by Friday. Lunch was good."

    assert asyncio.run(service.summarize(transcript)) == "We reviewed the budget. Anna will send the report by Friday."
    assert asyncio.run(service.extract_action_items(transcript)) == "* Anna will send the report by Friday."
    assert asyncio.run(service.extract_action_items("Nothing to see.")) == "No action items found."
    assert service.name() == "local:extractive"


def _enricher(handler) -> OpenAICompatEnricher:
    return OpenAICompatEnricher(
        base_url="https://llm.example.test/",
        api_key="sk-test",
        model="gpt-4o-mini",
        max_chars=10,
        transport=httpx.MockTransport(handler),
    )


def test_openai_compat_posts_chat_completion() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "- item"}}]})

    service = _enricher(handler)
    assert asyncio.run(service.extract_action_items("0123456789abcdef")) == "- item"
    assert captured["url"] == "https://llm.example.test/v1/chat/completions"
    assert captured["auth"] == "Bearer sk-test"
    assert captured["body"]["model"] == "gpt-4o-mini"
    assert captured["body"]["messages"][1]["content"] == "0123456789"
    assert service.name() == "external:openai:gpt-4o-mini"


def test_openai_compat_maps_http_status_to_error() -> None:
    service = _enricher(lambda request: httpx.Response(500, text="upstream down"))
    try:
        asyncio.run(service.summarize("text"))
    except EnrichmentError as exc:
        assert exc.code == "external_http_500"
    else:
        raise AssertionError("expected EnrichmentError")


def test_openai_compat_rejects_malformed_payload() -> None:
    service = _enricher(lambda request: httpx.Response(200, json={"choices": []}))
    try:
        asyncio.run(service.summarize("text"))
    except EnrichmentError as exc:
        assert exc.code == "external_bad_response"
    else:
        raise AssertionError("expected EnrichmentError")


def test_openai_compat_wraps_transport_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    try:
        asyncio.run(_enricher(handler).summarize("text"))
    except EnrichmentError as exc:
        assert exc.code == "external_request_failed"
    else:
        raise AssertionError("expected EnrichmentError")

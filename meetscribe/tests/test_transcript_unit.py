from meetscribe.dictation.models import RecognitionAlternative, RecognitionResult
from meetscribe.dictation.transcript import TranscriptBuffer, collect_final_text


def _result(text: str, is_final: bool) -> RecognitionResult:
    return RecognitionResult(is_final=is_final, alternatives=[RecognitionAlternative(transcript=text)])


def test_collect_final_text_scans_from_resume_index_and_skips_interim() -> None:
    results = [_result("a", True), _result("b", False), _result("c", True), _result("d", True)]
    assert collect_final_text(results, 0) == "acd"
    assert collect_final_text(results, 2) == "cd"
    assert collect_final_text(results, 4) == ""


def test_collect_final_text_uses_first_alternative() -> None:
    result = RecognitionResult(
        is_final=True,
        alternatives=[
            RecognitionAlternative(transcript="best", confidence=0.9),
            RecognitionAlternative(transcript="second", confidence=0.4),
        ],
    )
    assert collect_final_text([result]) == "best"
    assert collect_final_text([RecognitionResult(is_final=True)]) == ""


def test_buffer_appends_with_literal_delimiter_and_allows_replace() -> None:
    buffer = TranscriptBuffer(delimiter="។ ")
    assert buffer.append_chunk("one") is True
    assert buffer.append_chunk("  ") is False
    assert buffer.append_chunk(" two ") is True
    assert buffer.text == "one។  two ។ "

    buffer.replace("typed by hand")
    assert buffer.text == "typed by hand"
    buffer.append_chunk("more")
    assert buffer.text == "typed by handmore។ "

    buffer.clear()
    assert buffer.text == ""

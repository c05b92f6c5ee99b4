import threading

import pytest

from LLM_API.exceptions import (
    LLMAPIError,
    LLMAuthenticationError,
    LLMTimeoutError,
    LLMUnsupportedProtocolError,
)

from deck_agent.exceptions import TurnInFlightError
from deck_agent.orchestrator import (
    EXHAUSTED_NOTICE,
    FORCING_NOTICE,
    SlideAgentOrchestrator,
    TurnState,
)
from deck_agent.slide_models import PresentationSettings, SlideDocument

from tests.llm_stubs import (
    ScriptedToolLLM,
    always_calls,
    always_text,
    last_system_message,
    parse_tool_results,
    respond,
    tool_call,
)


def _orchestrator(llm, slides=None, **kwargs):
    document = SlideDocument(slides=list(slides or []))
    return SlideAgentOrchestrator(llm, document, PresentationSettings(), **kwargs)


def test_zero_tool_calls_finishes_in_one_request():
    llm = ScriptedToolLLM(default=always_text("Nothing to change."))
    orchestrator = _orchestrator(llm, ["a"])
    result = orchestrator.run_turn("hello")
    assert result.state is TurnState.DONE
    assert result.requests == 1
    assert llm.total_requests == 1
    assert [m.content for m in result.messages] == ["hello", "Nothing to change."]


def test_always_calling_model_is_exhausted_at_cap():
    llm = ScriptedToolLLM(default=always_calls("get_total_slides"))
    orchestrator = _orchestrator(llm, ["a"], max_iterations=10)
    result = orchestrator.run_turn("keep going")
    assert result.state is TurnState.EXHAUSTED
    assert result.requests == 10
    assert llm.total_requests == 10
    assert len(result.tool_results) == 10
    assert result.messages[-1].content == EXHAUSTED_NOTICE
    assert not result.completed


def test_tool_results_are_fed_back_as_one_system_turn():
    llm = ScriptedToolLLM(
        [
            respond(
                "Adding two slides.",
                tool_call("add_slide", "c1", content="<h2>X</h2>"),
                tool_call("delete_slide", "c2", index=9),
            ),
            respond("All set."),
        ]
    )
    orchestrator = _orchestrator(llm, ["<h1>A</h1>"])
    result = orchestrator.run_turn("add a slide")

    assert result.state is TurnState.DONE
    second_request = llm.requests[1]
    roles = [message.role for message in second_request.messages]
    assert roles == ["user", "assistant", "system"]
    feedback = parse_tool_results(last_system_message(second_request))
    assert [item["name"] for item in feedback] == ["add_slide", "delete_slide"]
    assert feedback[0]["success"] is True
    assert feedback[1] == {
        "name": "delete_slide",
        "success": False,
        "message": "Invalid slide index: 9",
    }
    assert orchestrator.document.slides == ["<h1>A</h1>", "<h2>X</h2>"]


def test_batch_runs_sequentially_with_partial_success():
    llm = ScriptedToolLLM(
        [
            respond(
                tool_call("replace_all_slides", "c1", slides=["1", "2", "3"]),
                tool_call("delete_slide", "c2", index=2),
                tool_call("update_slide", "c3", index=2, content="late"),
                tool_call("update_slide", "c4", index=0, content="first"),
            ),
            respond("Done."),
        ]
    )
    orchestrator = _orchestrator(llm, ["old"])
    result = orchestrator.run_turn("rebuild")
    assert [r.success for r in result.tool_results] == [True, True, False, True]
    assert orchestrator.document.slides == ["first", "2"]


def test_annotations_are_surfaced_immediately():
    seen = []
    llm = ScriptedToolLLM(
        [
            respond("Reading first.", tool_call("get_all_slides")),
            respond(tool_call("update_slide", index=0, content="B")),
            respond("Finished."),
        ]
    )
    orchestrator = _orchestrator(llm, ["A"], on_message=seen.append)
    orchestrator.run_turn("change the slide")
    assert [m.content for m in seen] == [
        "change the slide",
        "Reading first.",
        "📖 Read 1 slides",
        "✓ Slide 0 updated",
        "Finished.",
    ]
    assert orchestrator.display_messages == seen


def test_output_text_used_when_no_text_segment():
    llm = ScriptedToolLLM([respond(text="Final answer from output_text")])
    result = _orchestrator(llm).run_turn("hi")
    assert result.messages[-1].role == "assistant"
    assert result.messages[-1].content == "Final answer from output_text"


def test_output_text_ignored_when_segments_present():
    llm = ScriptedToolLLM([respond("segment", text="segment")])
    result = _orchestrator(llm).run_turn("hi")
    assert [m.content for m in result.messages] == ["hi", "segment"]


def test_forced_completion_after_read_only_stall():
    llm = ScriptedToolLLM(
        [
            respond(tool_call("get_all_slides")),
            respond("I looked at your slides."),
            respond(tool_call("replace_all_slides", slides=["<h1>T</h1>", "<h2>P</h2>"])),
        ]
    )
    orchestrator = _orchestrator(llm, ["a", "b", "c", "d", "e"])
    result = orchestrator.run_turn("reduce this to 2 slides")

    assert result.state is TurnState.DONE
    assert result.forced_completion
    assert result.requests == 3
    assert FORCING_NOTICE in [m.content for m in result.messages]
    instruction = last_system_message(llm.requests[2])
    assert "replace_all_slides RIGHT NOW with exactly 2 slides" in instruction
    assert orchestrator.document.slides == ["<h1>T</h1>", "<h2>P</h2>"]


def test_forced_completion_runs_only_once():
    llm = ScriptedToolLLM(
        [
            respond(tool_call("get_all_slides")),
            respond("Looked."),
            respond("Still just talking."),
        ]
    )
    result = _orchestrator(llm, ["a"]).run_turn("create a presentation about owls")
    assert result.state is TurnState.DONE
    assert result.requests == 3
    assert llm.total_requests == 3


def test_forced_completion_surfaces_output_text():
    llm = ScriptedToolLLM(
        [
            respond(tool_call("get_all_slides")),
            respond("Reading done."),
            respond(text="Could not rewrite the deck."),
        ]
    )
    result = _orchestrator(llm, ["a", "b"]).run_turn("condense the deck")
    assert result.state is TurnState.DONE
    assert result.forced_completion
    assert result.messages[-1].role == "assistant"
    assert result.messages[-1].content == "Could not rewrite the deck."


def test_no_forced_completion_without_matching_intent():
    llm = ScriptedToolLLM([respond(tool_call("get_total_slides")), respond("3 slides.")])
    result = _orchestrator(llm, ["a", "b", "c"]).run_turn("how many are there?")
    assert not result.forced_completion
    assert result.requests == 2


def test_no_forced_completion_after_a_write():
    llm = ScriptedToolLLM(
        [
            respond(tool_call("get_all_slides"), tool_call("replace_all_slides", slides=["x"])),
            respond("Done."),
        ]
    )
    result = _orchestrator(llm, ["a", "b"]).run_turn("condense it")
    assert not result.forced_completion


def test_fallback_to_chat_completions_is_sticky_for_the_turn():
    llm = ScriptedToolLLM(
        responses_unsupported=True,
        chat_responses=[respond(tool_call("get_total_slides")), respond("Two slides.")],
    )
    orchestrator = _orchestrator(llm, ["a", "b"])
    result = orchestrator.run_turn("count")
    assert result.state is TurnState.DONE
    assert len(llm.requests) == 1
    assert len(llm.chat_requests) == 2
    assert llm.chat_requests[0].messages[-1].content == "count"
    assert "viewing slide 1" in llm.chat_requests[0].instructions


def test_each_turn_tries_responses_convention_again():
    llm = ScriptedToolLLM(
        responses_unsupported=True,
        chat_responses=[respond("one"), respond("two")],
    )
    orchestrator = _orchestrator(llm)
    orchestrator.run_turn("first")
    orchestrator.run_turn("second")
    assert len(llm.requests) == 2
    assert len(llm.chat_requests) == 2


def test_chat_failure_after_fallback_is_terminal():
    llm = ScriptedToolLLM(
        responses_unsupported=True,
        chat_responses=[
            LLMUnsupportedProtocolError(message="still unsupported", provider="Stub")
        ],
    )
    orchestrator = _orchestrator(llm, ["a"])
    result = orchestrator.run_turn("hi")
    assert result.state is TurnState.FAILED
    assert result.error == "still unsupported"
    assert orchestrator.document.slides == ["a"]


def test_timeout_fails_the_turn():
    llm = ScriptedToolLLM(
        [LLMTimeoutError(message="Request timed out.", provider="Stub", error_type="timeout")]
    )
    result = _orchestrator(llm).run_turn("hi")
    assert result.state is TurnState.FAILED
    assert result.error_type == "timeout"
    assert result.messages[-1].content == "Error: Request timed out."


def test_credential_error_surfaced_verbatim_and_no_mutation():
    llm = ScriptedToolLLM(
        [
            LLMAuthenticationError(
                message="Incorrect API key provided", provider="Stub", error_type="authentication"
            )
        ]
    )
    orchestrator = _orchestrator(llm, ["a"])
    result = orchestrator.run_turn("delete everything")
    assert result.state is TurnState.FAILED
    assert result.error == "Incorrect API key provided"
    assert result.tool_results == []


def test_failure_mid_turn_keeps_earlier_effects():
    llm = ScriptedToolLLM(
        [
            respond(tool_call("add_slide", content="new")),
            LLMAPIError(message="upstream 500", provider="Stub"),
        ]
    )
    orchestrator = _orchestrator(llm, ["a"])
    result = orchestrator.run_turn("add")
    assert result.state is TurnState.FAILED
    assert orchestrator.document.slides == ["a", "new"]


def test_cancel_before_first_request():
    llm = ScriptedToolLLM(default=always_text())
    cancel = threading.Event()
    cancel.set()
    result = _orchestrator(llm).run_turn("hi", cancel_event=cancel)
    assert result.state is TurnState.CANCELLED
    assert result.requests == 0


def test_cancel_between_iterations():
    cancel = threading.Event()

    def cancelling(request):
        cancel.set()
        return respond(tool_call("get_total_slides"))

    llm = ScriptedToolLLM(default=cancelling)
    result = _orchestrator(llm, ["a"]).run_turn("loop", cancel_event=cancel)
    assert result.state is TurnState.CANCELLED
    assert result.requests == 1
    assert len(result.tool_results) == 1


def test_second_turn_while_in_flight_is_rejected():
    holder = {}

    def reentrant(request):
        with pytest.raises(TurnInFlightError):
            holder["orchestrator"].run_turn("interleaved")
        return respond("ok")

    llm = ScriptedToolLLM(default=reentrant)
    orchestrator = _orchestrator(llm)
    holder["orchestrator"] = orchestrator
    result = orchestrator.run_turn("first")
    assert result.state is TurnState.DONE
    assert not orchestrator.busy


def test_empty_input_is_rejected():
    orchestrator = _orchestrator(ScriptedToolLLM())
    with pytest.raises(ValueError):
        orchestrator.run_turn("   ")


def test_conversation_carries_user_and_assistant_text_across_turns():
    llm = ScriptedToolLLM(
        [
            respond(tool_call("get_total_slides")),
            respond("You have 1 slide."),
            respond("Sure."),
        ]
    )
    orchestrator = _orchestrator(llm, ["a"])
    orchestrator.run_turn("how many?")
    orchestrator.run_turn("thanks")
    third = llm.requests[2]
    assert [(m.role, m.content) for m in third.messages] == [
        ("user", "how many?"),
        ("assistant", "You have 1 slide."),
        ("user", "thanks"),
    ]


def test_instructions_reflect_live_document_state():
    llm = ScriptedToolLLM(
        [respond(tool_call("add_slide", content="c")), respond("done")]
    )
    orchestrator = _orchestrator(llm, ["a", "b"])
    orchestrator.run_turn("add")
    assert "Total slides: 2" in llm.requests[0].instructions
    assert "Total slides: 3" in llm.requests[1].instructions
    assert "(index: 2)" in llm.requests[1].instructions


def test_every_request_advertises_all_tools():
    llm = ScriptedToolLLM(default=always_text())
    _orchestrator(llm).run_turn("hi")
    assert len(llm.requests[0].functions) == 8

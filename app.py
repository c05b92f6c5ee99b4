"""Streamlit UI for building reveal.js presentations through the slide agent."""

from __future__ import annotations

import logging
import os
import textwrap
from typing import List, Optional

import streamlit as st
import streamlit.components.v1 as components

from LLM_API.base import CallModel
from LLM_API.data_classes import (
    CallingConvention,
    ChatMessage,
    FunctionCall,
    FunctionCallingRequest,
    FunctionCallingResponse,
    ProviderConfig,
    TextSegment,
)
from LLM_API.exceptions import LLMError

from deck_agent.completion_policy import target_slide_count
from deck_agent.config import AgentSettings
from deck_agent.exceptions import SlideDocumentError, TurnInFlightError
from deck_agent.orchestrator import SlideAgentOrchestrator, result_summary
from deck_agent.reveal_renderer import RevealRenderer
from deck_agent.slide_document import SlideDocumentStore
from deck_agent.slide_models import PresentationSettings, SlideDocument
from deck_agent.tool_schemas import THEMES

LOGGER = logging.getLogger(__name__)

STUB_MODE = "スタブ生成"
OPENAI_MODE = "OpenAI"


def _extract_request_excerpt(prompt: str, *, max_width: int = 40) -> str:
    """Return a concise summary of the user request."""

    section = (prompt or "").strip().replace("\n", " ")
    if not section:
        return "ユーザー入力なし"
    return textwrap.shorten(section, width=max_width, placeholder="…")


def _submitted_prompt(prompt: Optional[str]) -> Optional[str]:
    """Return the chat input when it carries text, else ``None``."""

    if prompt and prompt.strip():
        return prompt
    return None


class StubToolCallingLLM(CallModel):
    """Offline stand-in that answers every request with scripted tool calls.

    The first request of a turn replaces the deck with a short outline built
    from the user's wording; once tool results are in the transcript it
    replies with a closing message and no calls.
    """

    def __init__(self) -> None:
        super().__init__(api_key=None, model_name="stub-tool-calling")

    def setup_client(self) -> None:
        self.client = None

    def _get_provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider_name="Stub",
            model_name="stub-tool-calling",
        )

    def function_calling(self, request: FunctionCallingRequest) -> FunctionCallingResponse:
        return self._respond(request, CallingConvention.RESPONSES)

    def chat_function_calling(self, request: FunctionCallingRequest) -> FunctionCallingResponse:
        return self._respond(request, CallingConvention.CHAT_COMPLETIONS)

    def _respond(
        self, request: FunctionCallingRequest, convention: CallingConvention
    ) -> FunctionCallingResponse:
        user_index = max(
            (idx for idx, message in enumerate(request.messages) if message.role == "user"),
            default=-1,
        )
        if user_index < 0:
            return FunctionCallingResponse(
                text="リクエストが見つかりませんでした。",
                model_used=self.model_name,
                output_items=[TextSegment("リクエストが見つかりませんでした。")],
                convention=convention,
            )

        follow_ups = request.messages[user_index + 1:]
        if any(message.role == "system" for message in follow_ups):
            closing = "スライドを更新しました。調整したい点があれば教えてください。"
            return FunctionCallingResponse(
                text=closing,
                model_used=self.model_name,
                output_items=[TextSegment(closing)],
                convention=convention,
            )

        prompt = request.messages[user_index].content
        slides = self._outline(prompt)
        arguments = {"slides": slides}
        return FunctionCallingResponse(
            text="",
            model_used=self.model_name,
            output_items=[
                TextSegment(f"{len(slides)}枚の構成でスライドを作成します。"),
                FunctionCall(
                    id="stub_call_1",
                    name="replace_all_slides",
                    arguments=arguments,
                    call_id="stub_call_1",
                ),
            ],
            convention=convention,
        )

    @staticmethod
    def _outline(prompt: str) -> List[str]:
        excerpt = _extract_request_excerpt(prompt)
        count = max(2, min(target_slide_count(prompt), 8))
        slides = [f"<h1>{excerpt}</h1><h3>スタブ生成による構成案</h3>"]
        for number in range(1, count - 1):
            slides.append(
                f"<h2>ポイント {number}</h2><ul><li>{excerpt}に関する要点</li></ul>"
            )
        slides.append("<h2>まとめ</h2><p>次のアクションを確認します。</p>")
        return slides


# ----------------------------------------------------------------------
# Session helpers
# ----------------------------------------------------------------------
def _init_session(settings: AgentSettings) -> None:
    if "document" not in st.session_state:
        document = SlideDocument()
        presentation = PresentationSettings()
        st.session_state["document"] = document
        st.session_state["presentation"] = presentation
        st.session_state["renderer"] = RevealRenderer(document, presentation)
    st.session_state.setdefault("orchestrator", None)
    st.session_state.setdefault("orchestrator_key", None)
    st.session_state.setdefault("api_key", os.getenv("OPENAI_API_KEY", ""))
    st.session_state.setdefault("last_summary", "")


def _replace_deck(document: SlideDocument, presentation: PresentationSettings) -> None:
    old_renderer: Optional[RevealRenderer] = st.session_state.get("renderer")
    if old_renderer is not None:
        old_renderer.close()
    st.session_state["document"] = document
    st.session_state["presentation"] = presentation
    st.session_state["renderer"] = RevealRenderer(document, presentation)
    st.session_state["orchestrator"] = None
    st.session_state["orchestrator_key"] = None


def _get_orchestrator(
    mode: str, settings: AgentSettings, api_key: str
) -> Optional[SlideAgentOrchestrator]:
    key = (mode, api_key, id(st.session_state["document"]))
    current: Optional[SlideAgentOrchestrator] = st.session_state.get("orchestrator")
    if current is not None and st.session_state.get("orchestrator_key") == key:
        return current

    document = st.session_state["document"]
    presentation = st.session_state["presentation"]
    if mode == OPENAI_MODE:
        try:
            orchestrator = SlideAgentOrchestrator.from_settings(
                settings, document, presentation, api_key=api_key or None
            )
        except LLMError as exc:
            st.warning("OpenAIクライアントの初期化に失敗しました。APIキーを確認してください。")
            st.text(str(exc))
            return None
    else:
        orchestrator = SlideAgentOrchestrator(
            StubToolCallingLLM(),
            document,
            presentation,
            max_iterations=settings.max_iterations,
        )

    if current is not None:
        orchestrator.conversation.extend(current.conversation)
        orchestrator.display_messages.extend(current.display_messages)
    st.session_state["orchestrator"] = orchestrator
    st.session_state["orchestrator_key"] = key
    return orchestrator


def _render_message(message: ChatMessage) -> None:
    role = "assistant" if message.role == "system" else message.role
    with st.chat_message(role):
        if message.role == "system":
            st.caption(message.content)
        else:
            st.markdown(message.content)


# ----------------------------------------------------------------------
# Page sections
# ----------------------------------------------------------------------
def _sidebar(settings: AgentSettings) -> str:
    with st.sidebar:
        st.header("エージェント設定")
        mode = st.radio(
            "生成モード",
            (STUB_MODE, OPENAI_MODE),
            index=0,
            help="OpenAIキーが未設定の場合はスタブ生成を利用してください。",
        )
        if mode == OPENAI_MODE:
            st.session_state["api_key"] = st.text_input(
                "OpenAI APIキー",
                value=st.session_state["api_key"],
                type="password",
            )
            st.caption(
                f"Responses: `{settings.responses_model}` / Chat: `{settings.chat_model}`"
            )

        presentation: PresentationSettings = st.session_state["presentation"]
        theme = st.selectbox("テーマ", THEMES, index=THEMES.index(presentation.theme))
        if theme != presentation.theme:
            presentation.change_theme(theme)

        st.divider()
        uploaded = st.file_uploader("デッキJSONを読み込む", type="json")
        if uploaded is not None and st.session_state.get("uploaded_name") != uploaded.name:
            try:
                document, loaded = SlideDocumentStore.loads(uploaded.getvalue().decode("utf-8"))
            except ValueError as exc:
                st.error(f"JSONの読み込みに失敗しました: {exc}")
            else:
                _replace_deck(document, loaded)
                st.session_state["uploaded_name"] = uploaded.name
                st.success("デッキを読み込みました。")

        st.download_button(
            "デッキJSONをダウンロード",
            data=SlideDocumentStore.dumps(
                st.session_state["document"], st.session_state["presentation"]
            ).encode("utf-8"),
            file_name="deck.json",
            mime="application/json",
        )
        if st.button("会話をリセット"):
            orchestrator = st.session_state.get("orchestrator")
            if orchestrator is not None:
                orchestrator.reset_conversation()
        if st.session_state["last_summary"]:
            st.caption(st.session_state["last_summary"])
    return mode


def _chat_panel(mode: str, settings: AgentSettings) -> None:
    st.subheader("チャット")
    api_key = st.session_state["api_key"]
    if mode == OPENAI_MODE and not api_key:
        st.info("OpenAIモードではAPIキーを入力してください。")
        return

    orchestrator = _get_orchestrator(mode, settings, api_key)
    if orchestrator is None:
        return

    for message in orchestrator.display_messages:
        _render_message(message)

    prompt = _submitted_prompt(st.chat_input("例：Pythonの非同期処理について5枚のスライドを作成して"))
    if prompt is None:
        return

    orchestrator.on_message = _render_message
    try:
        with st.spinner("エージェントが作業中です…"):
            result = orchestrator.run_turn(prompt)
    except TurnInFlightError:
        st.warning("前のリクエストを処理中です。完了までお待ちください。")
        return
    finally:
        orchestrator.on_message = None
    st.session_state["last_summary"] = result_summary(result)
    LOGGER.info("Turn summary: %s", st.session_state["last_summary"])
    st.rerun()


def _slides_panel() -> None:
    document: SlideDocument = st.session_state["document"]
    renderer: RevealRenderer = st.session_state["renderer"]

    st.subheader("プレビュー")
    components.html(renderer.render_html(), height=480)

    total = document.get_total_slides()
    if total:
        shown = st.number_input(
            "表示中のスライド",
            min_value=1,
            max_value=total,
            value=document.get_current_index() + 1,
            step=1,
        )
        if int(shown) - 1 != document.get_current_index():
            renderer.index_changed(int(shown) - 1)
            st.rerun()

    st.subheader(f"スライド一覧 ({total}枚)")
    cols = st.columns(4)
    try:
        if cols[0].button("空のスライドを追加"):
            inserted = document.add_slide("<h2>新しいスライド</h2>")
            document.navigate_to_slide(inserted)
            st.rerun()
        if total and cols[1].button("前へ移動") and document.get_current_index() > 0:
            current = document.get_current_index()
            document.reorder_slide(current, current - 1)
            st.rerun()
        if total and cols[2].button("後ろへ移動") and document.get_current_index() < total - 1:
            current = document.get_current_index()
            document.reorder_slide(current, current + 1)
            st.rerun()
        if total and cols[3].button("削除"):
            document.delete_slide(document.get_current_index())
            st.rerun()
    except SlideDocumentError as exc:
        st.warning(str(exc))

    if total:
        current = document.get_current_index()
        edited = st.text_area(
            f"スライド {current + 1} のHTML",
            value=document.get_slide_content(current) or "",
            height=160,
            key=f"editor_{current}_{renderer.revision}",
        )
        if st.button("変更を保存") and edited != document.get_slide_content(current):
            document.update_slide(current, edited)
            st.rerun()

    for index, slide in enumerate(document.get_all_slides()):
        marker = "▶ " if index == document.get_current_index() else ""
        st.markdown(f"{marker}**{index + 1}.** `{_extract_request_excerpt(slide, max_width=70)}`")


def main() -> None:
    settings = AgentSettings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    st.set_page_config(page_title="Slide Agent", layout="wide")
    st.title("Slide Agent")
    _init_session(settings)

    mode = _sidebar(settings)
    col_chat, col_slides = st.columns([2, 3])
    with col_chat:
        _chat_panel(mode, settings)
    with col_slides:
        _slides_panel()


if __name__ == "__main__":  # pragma: no cover - Streamlit handles execution
    main()

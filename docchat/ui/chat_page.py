"""NiceGUI chat interface driven by the session controller."""

import logging

from nicegui import events, ui

from docchat.client import ClientConfig, HttpxTransport, SessionController, get_client_config
from docchat.client.config import ALLOWED_MODELS
from docchat.models import Attachment, BotSettings, HistoryEntry, Role

logger = logging.getLogger(__name__)


def format_sources(sources: list[str]) -> str:
    """Render citations as a markdown section."""
    items = "\n".join(f"- {source}" for source in sources)
    return f"#### Sources:\n{items}"


def format_error(error: str) -> str:
    """Render a turn error as a fenced markdown block."""
    return f"Error getting response:\n```\n{error}\n```"


def speaker_label(entry: HistoryEntry) -> str:
    if entry.role == Role.USER:
        return "You:"
    if entry.role == Role.SYSTEM:
        return "System:"
    return "DDG:"


def input_placeholder(controller: SessionController) -> str:
    if controller.busy:
        return "Awaiting response..."
    return f"Collection: {controller.collection.user_facing_name}"


def show_placeholder(input_field: ui.input, text: str) -> None:
    input_field.props["placeholder"] = text
    input_field.update()


CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #0f172a; color: #94a3b8; min-height: 100vh; }

    .speaker { color: #db2777; font-weight: 700; }

    .error-box {
        border: 1px solid #db2777;
        border-radius: 8px;
        padding: 0.5rem;
    }

    .chat-input {
        background: #1e293b;
        border-radius: 8px;
    }

    .send-btn { background: #be185d !important; }
    .send-btn:disabled { background: #737373 !important; }
</style>
"""


@ui.page("/")
def chat_page() -> None:
    """Connection form followed by the chat view."""
    ui.add_head_html(CUSTOM_CSS)
    ui.dark_mode().enable()
    defaults = get_client_config()

    root = ui.column().classes("w-full max-w-4xl mx-auto p-4 gap-4")

    def start_chat(url: str, api_key: str, openai_api_key: str) -> None:
        try:
            config = get_client_config(
                api_url=url, api_key=api_key, openai_api_key=openai_api_key
            )
        except ValueError as e:
            ui.notify(str(e), type="negative")
            return
        root.clear()
        with root:
            render_chat(config)

    with root, ui.column().classes("w-full max-w-2xl mx-auto items-stretch pb-12"):
        ui.label("DocDocGo Test Interface").classes(
            "text-4xl font-bold text-slate-300 text-center mb-12"
        )
        url_input = ui.input("DocDocGo API URL", value=defaults.api_url)
        key_input = ui.input("DocDocGo API Key", value=defaults.api_key)
        openai_input = ui.input(
            "OpenAI API Key (optional)", value=defaults.openai_api_key or ""
        )
        ui.button(
            "Start Chat",
            on_click=lambda: start_chat(
                url_input.value, key_input.value, openai_input.value
            ),
        ).classes("mt-6 send-btn")


def render_chat(config: ClientConfig) -> None:
    """Build the chat view for a configured session."""
    transport = HttpxTransport(config.api_url, timeout=config.request_timeout)

    messages_container: ui.column
    uploader_area: ui.column
    input_field: ui.input
    send_btn: ui.button

    def refresh() -> None:
        messages_container.clear()
        with messages_container:
            for entry in controller.history:
                with ui.column().classes("w-full mb-8 gap-1"):
                    ui.label(speaker_label(entry)).classes("speaker")
                    ui.markdown(entry.content)
                    if entry.sources:
                        ui.markdown(format_sources(entry.sources)).classes("mt-4")
            if controller.last_error:
                with ui.element("div").classes("w-full error-box mb-8"):
                    ui.markdown(format_error(controller.last_error))

        show_placeholder(input_field, input_placeholder(controller))
        input_field.set_enabled(not controller.busy)
        send_btn.set_enabled(not controller.busy)
        if controller.show_uploader:
            uploader_area.set_visibility(True)

    controller = SessionController(transport, config, on_update=refresh)

    async def send_message() -> None:
        text = input_field.value.strip()
        if controller.busy or not (text or controller.selected_files):
            return
        input_field.value = ""
        await controller.submit(text)
        uploader.reset()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        controller.add_file(
            Attachment(
                filename=e.file.name,
                content=await e.file.read(),
                content_type=e.file.content_type or "application/octet-stream",
            )
        )
        ui.notify(f"Attached {e.file.name}")

    def open_settings() -> None:
        settings = controller.bot_settings

        def apply(model: str, temperature: float) -> None:
            controller.update_settings(
                BotSettings(llm_model_name=model, temperature=temperature)
            )

        with ui.dialog() as dialog, ui.card().classes("w-96"):
            ui.label("Change settings").classes("text-lg font-semibold")
            ui.label(
                "Note: you can't customize your settings if you are using the "
                "community OpenAI API key."
            ).classes("text-sm")
            options = list(dict.fromkeys([*ALLOWED_MODELS, settings.llm_model_name]))
            model_select = ui.select(options, label="Model", value=settings.llm_model_name)
            temp_label = ui.label()
            temp_slider = ui.slider(min=0.0, max=2.0, step=0.01, value=settings.temperature)
            temp_label.bind_text_from(temp_slider, "value", lambda v: f"Temperature - {v}")

            def reset() -> None:
                model_select.value = config.model_name
                temp_slider.value = config.temperature

            def done() -> None:
                apply(model_select.value, float(temp_slider.value))
                dialog.close()

            with ui.row().classes("w-full justify-end gap-2"):
                ui.button("Reset", on_click=reset).props("flat")
                ui.button("Done", on_click=done)
        dialog.open()

    with ui.row().classes("w-full justify-end"):
        ui.button("Settings", icon="settings", on_click=open_settings)

    messages_container = ui.column().classes("w-full gap-0")

    uploader_area = ui.column().classes("w-full")
    with uploader_area:
        uploader = ui.upload(
            label="Attach files", multiple=True, auto_upload=True, on_upload=handle_upload
        ).classes("w-full")
    uploader_area.set_visibility(False)

    with ui.row().classes("w-full mt-4 items-center gap-2 no-wrap"):
        ui.button(
            icon="attach_file",
            on_click=lambda: uploader_area.set_visibility(not uploader_area.visible),
        ).props("flat round")
        input_field = (
            ui.input(placeholder=input_placeholder(controller))
            .classes("flex-grow chat-input px-4")
            .props("borderless dense")
            .on("keydown.enter", send_message)
        )
        send_btn = ui.button("Send", on_click=send_message).classes("send-btn px-8")

    refresh()

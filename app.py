"""Streamlit entry point for the MVPfin service report app."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

import streamlit as st
from mvpfin import auth, insights, markers, report, settings, store, summarize, utils, viz
from mvpfin.logging_config import setup_logging
from mvpfin.models import DayType, EntryMarker, ReportState
from mvpfin.store import SQLiteRecordStore, StoreError

logger = logging.getLogger("mvpfin.app")

DAY_TYPE_OPTIONS = [day_type.value for day_type in DayType]

LIGHT_CSS = """
<style>
:root {
    --primary-500: #6366f1;
    --primary-600: #4f46e5;
    --surface: #ffffff;
    --canvas: #f8fafc;
    --text: #1e293b;
    --muted: #64748b;
    --border: rgba(226, 232, 240, 0.9);
}
"""

DARK_CSS = """
<style>
:root {
    --primary-500: #818cf8;
    --primary-600: #6366f1;
    --surface: #1e293b;
    --canvas: #0f172a;
    --text: #f1f5f9;
    --muted: #94a3b8;
    --border: rgba(51, 65, 85, 0.9);
}
"""

SHARED_CSS = """
[data-testid="stAppViewContainer"] {
    background: var(--canvas);
    color: var(--text);
}

[data-testid="stHeader"] {
    background: transparent;
}

[data-testid="stSidebar"] {
    background: var(--surface) !important;
    border-right: 1px solid var(--border);
}

h1, h2, h3, label, p, span {
    color: var(--text);
}

.total-card {
    background: linear-gradient(135deg, #0f172a, #1e293b 55%, #1e1b4b);
    border-radius: 28px;
    border: 1px solid rgba(255, 255, 255, 0.05);
    padding: 1.75rem 2rem;
    margin-bottom: 1rem;
}

.total-card__label {
    font-size: 0.75rem;
    font-weight: 700;
    text-transform: uppercase;
    letter-spacing: 0.12em;
    color: #a5b4fc;
    margin-bottom: 0.5rem;
}

.total-card__value {
    font-size: 2.8rem;
    font-weight: 900;
    color: #ffffff;
    line-height: 1.1;
}

.total-card__row {
    display: flex;
    justify-content: space-between;
    font-size: 0.9rem;
    color: #cbd5e1;
    margin-top: 0.6rem;
}

.total-card__row strong {
    color: #ffffff;
}

.preview-footer {
    font-size: 0.75rem;
    color: var(--muted);
    text-align: center;
}
</style>
"""


@st.cache_resource(show_spinner=False)
def _get_store(db_path: str) -> SQLiteRecordStore:
    return SQLiteRecordStore(db_path)


def _inject_theme(theme: settings.Theme) -> None:
    css = DARK_CSS if theme == "dark" else LIGHT_CSS
    st.markdown(css + SHARED_CSS, unsafe_allow_html=True)


def _current_report() -> ReportState:
    return st.session_state["report"]


def _store_report(new_report: ReportState) -> None:
    st.session_state["report"] = new_report


def _sync_form_widgets(current: ReportState, *, only_missing: bool = False) -> None:
    """Push report fields into the widgets that display them.

    Streamlit forgets the state of widgets that were not rendered in the last
    run, so the report view re-seeds them with ``only_missing=True``.
    """

    fields = {
        "form_date": current.date,
        "form_day_type": current.day_type.value,
        "form_other_day": current.other_day_description,
        "form_service_name": current.service_name,
    }
    for widget_key, value in fields.items():
        if only_missing and widget_key in st.session_state:
            continue
        st.session_state[widget_key] = value


def _on_date_change() -> None:
    updated = report.change_date(_current_report(), st.session_state.get("form_date"))
    _store_report(updated)
    _sync_form_widgets(updated)


def _on_day_type_change() -> None:
    day_type = DayType(st.session_state["form_day_type"])
    _store_report(replace(_current_report(), day_type=day_type))
    st.session_state["form_other_day"] = _current_report().other_day_description


def _on_text_change(field: str, widget_key: str) -> None:
    _store_report(replace(_current_report(), **{field: st.session_state[widget_key]}))


def _on_toggle(registry: markers.MarkerRegistry, key: str) -> None:
    _store_report(report.toggle_entry(_current_report(), registry, key))


def _on_amount_change(registry: markers.MarkerRegistry, key: str) -> None:
    widget_key = f"amount_{key}"
    current = _current_report()
    try:
        amount = report.parse_currency_input(st.session_state.get(widget_key))
        updated = report.update_value(current, registry, key, amount)
    except (utils.FormatError, report.UnknownMarkerError):
        logger.warning("Ignoring amount %r for %r", st.session_state.get(widget_key), key, exc_info=True)
        st.session_state[widget_key] = utils.format_amount(current.values.get(key, 0))
        return
    _store_report(updated)
    st.session_state[widget_key] = utils.format_amount(amount)


def _start_session(user) -> None:
    st.session_state["user"] = user
    st.session_state["view"] = "report"
    draft = report.new_report(date.today(), responsible=user.name)
    _store_report(draft)
    _sync_form_widgets(draft)


def _render_login(record_store: SQLiteRecordStore) -> None:
    _, center, _ = st.columns([1, 1.4, 1])
    with center:
        st.markdown("## 🔒 Bem-vindo")
        st.caption("Faça login para acessar o sistema.")
        with st.form("login", clear_on_submit=False):
            username = st.text_input("Usuário", placeholder="Digite seu usuário...")
            password = st.text_input("Senha", type="password", placeholder="••••••••")
            submitted = st.form_submit_button("Entrar", type="primary", use_container_width=True)

        if submitted:
            with st.spinner("Verificando..."):
                result = auth.login(record_store, username, password)
            if result.ok:
                _start_session(result.user)
                st.rerun()
            else:
                st.error(result.message)


def _render_general_info(users: list) -> None:
    current = _current_report()
    _sync_form_widgets(current, only_missing=True)
    st.markdown("### 🗓️ Informações Gerais")

    date_col, day_col = st.columns(2)
    with date_col:
        st.date_input(
            "Data do Culto",
            key="form_date",
            format="DD/MM/YYYY",
            on_change=_on_date_change,
        )
    with day_col:
        st.selectbox(
            "Dia do Culto",
            DAY_TYPE_OPTIONS,
            key="form_day_type",
            on_change=_on_day_type_change,
        )

    if current.day_type is DayType.OTHER:
        st.text_input(
            "Descrição do Dia",
            key="form_other_day",
            placeholder="Ex: Vigília",
            on_change=_on_text_change,
            args=("other_day_description", "form_other_day"),
        )

    st.text_input(
        "Nome/Tipo do Culto",
        key="form_service_name",
        placeholder="Ex: Culto de Celebração",
        on_change=_on_text_change,
        args=("service_name", "form_service_name"),
    )

    names = [user.name for user in users]
    if current.responsible and current.responsible not in names:
        names.insert(0, current.responsible)
    if names:
        st.selectbox(
            "Responsável pelo Relatório",
            names,
            index=names.index(current.responsible) if current.responsible in names else 0,
            disabled=True,
        )
    else:
        st.text_input(
            "Responsável pelo Relatório",
            value=current.responsible,
            placeholder="Cadastre usuários no Admin",
            disabled=True,
        )


def _render_entry_markers(registry: markers.MarkerRegistry) -> None:
    current = _current_report()
    st.markdown("### 💼 Marcador de Entradas")

    if not registry.is_loaded:
        st.caption("Carregando...")
        st.warning("Não foi possível carregar os marcadores de entrada.")
        return
    if registry.is_empty:
        st.caption("Nenhum marcador cadastrado. Configure-os no painel administrativo.")
        return

    toggle_cols = st.columns(min(len(registry), 4))
    for index, marker in enumerate(registry):
        with toggle_cols[index % len(toggle_cols)]:
            st.toggle(
                f"{markers.input_icon(marker)} {marker.label.upper()}",
                value=current.entries.get(marker.key, False),
                key=f"entry_{marker.key}",
                on_change=_on_toggle,
                args=(registry, marker.key),
            )

    for marker in registry:
        if not current.entries.get(marker.key):
            continue
        widget_key = f"amount_{marker.key}"
        if widget_key not in st.session_state:
            st.session_state[widget_key] = utils.format_amount(current.values.get(marker.key, 0))
        st.text_input(
            f"{markers.input_icon(marker)} Valor {marker.label} (R$)",
            key=widget_key,
            on_change=_on_amount_change,
            args=(registry, marker.key),
            help=f"Valor recebido via {marker.label}",
        )


def _render_consolidation(registry: markers.MarkerRegistry, theme: settings.Theme) -> None:
    current = _current_report()
    total = insights.compute_total(current.entries, current.values, registry)
    breakdown = insights.entry_breakdown(current.entries, current.values, registry)

    rows_html = viz.breakdown_rows_html(breakdown)
    st.markdown(
        f"""
        <div class="total-card">
            <div class="total-card__label">Consolidação de Entradas</div>
            <div class="total-card__value">{utils.format_currency(total)}</div>
            {rows_html}
        </div>
        """,
        unsafe_allow_html=True,
    )
    if breakdown:
        share_fig = viz.plot_entry_shares(breakdown, dark=theme == "dark")
        st.plotly_chart(share_fig, use_container_width=True, config={"displayModeBar": False})


def _render_preview(registry: markers.MarkerRegistry) -> None:
    current = _current_report()
    st.markdown("### 💬 Preview WhatsApp")
    try:
        message = summarize.render_message(current, registry)
    except utils.FormatError:
        logger.exception("Could not render share message")
        st.error("Não foi possível gerar a mensagem para esta data.")
        return

    st.code(message, language=None)
    st.download_button(
        "Baixar mensagem (.txt)",
        data=message,
        file_name=f"relatorio_{current.date.isoformat()}.txt",
        mime="text/plain",
        use_container_width=True,
    )
    st.markdown(
        '<p class="preview-footer">Use o ícone de cópia acima para copiar a mensagem. '
        "Este preview mostra exatamente como será a mensagem no WhatsApp.</p>",
        unsafe_allow_html=True,
    )


def _render_report(record_store: SQLiteRecordStore, theme: settings.Theme) -> None:
    registry = store.load_registry(record_store)
    users = store.load_users(record_store, "name")
    _store_report(report.ensure_entries(_current_report(), registry))

    left, right = st.columns([7, 5], gap="large")
    with left:
        with st.container(border=True):
            _render_general_info(users)
        with st.container(border=True):
            _render_entry_markers(registry)
    with right:
        _render_consolidation(registry, theme)
        with st.container(border=True):
            _render_preview(registry)


def _render_user_admin(record_store: SQLiteRecordStore) -> None:
    st.markdown("### 👤 Novo Usuário")
    with st.form("new_user", clear_on_submit=True):
        name = st.text_input("Nome", placeholder="Ex: João Silva")
        password = st.text_input("Senha", type="password", placeholder="••••••••")
        submitted = st.form_submit_button("Adicionar Usuário", type="primary")

    if submitted and name.strip():
        try:
            record_store.insert_user(name.strip(), name.strip(), password.strip(), role="user")
        except StoreError:
            logger.exception("Error adding user %r", name)
            st.error("Erro ao adicionar usuário. Verifique se o nome já existe.")
        else:
            st.success(f"Usuário {name.strip()} adicionado.")

    st.markdown("### 👥 Usuários Cadastrados")
    users = store.load_users(record_store, "created_at")
    if not users:
        st.caption("Nenhum usuário cadastrado.")
        return

    pending = st.session_state.get("pending_user_delete")
    for user in users:
        name_col, info_col, action_col = st.columns([3, 2, 1])
        name_col.markdown(f"**{user.name}**  \n`{user.username}` · {user.role}")
        info_col.caption("••••••••" if user.has_password else "Sem senha")
        if action_col.button("Excluir", key=f"delete_user_{user.id}"):
            st.session_state["pending_user_delete"] = user.id
            st.rerun()
        if pending == user.id:
            st.warning(f"Deseja realmente excluir {user.name}?")
            confirm_col, cancel_col = st.columns(2)
            if confirm_col.button("Confirmar exclusão", key=f"confirm_delete_{user.id}", type="primary"):
                st.session_state.pop("pending_user_delete", None)
                try:
                    record_store.delete_user(user.id)
                except StoreError:
                    logger.exception("Error deleting user %s", user.id)
                    st.error("Erro ao excluir usuário.")
                else:
                    st.rerun()
            if cancel_col.button("Cancelar", key=f"cancel_delete_{user.id}"):
                st.session_state.pop("pending_user_delete", None)
                st.rerun()


def _render_marker_admin(record_store: SQLiteRecordStore) -> None:
    st.markdown("### 🎛️ Personalizar Botões de Entrada")
    registry = store.load_registry(record_store)
    if not registry.is_loaded:
        st.warning("Não foi possível carregar os marcadores de entrada.")
        return

    if len(registry):
        table = utils.ensure_dataframe(
            {"Ordem": m.order, "Chave": m.key, "Nome": m.label, "Ícone": m.icon or "—"} for m in registry
        )
        st.dataframe(table.set_index("Ordem"), use_container_width=True)

    for marker in registry:
        with st.expander(f"{markers.input_icon(marker)} {marker.label}"):
            with st.form(f"marker_{marker.key}"):
                label = st.text_input("Nome", value=marker.label)
                icon = st.text_input("Emoji", value=marker.icon or "", max_chars=8)
                save_col, delete_col = st.columns(2)
                save = save_col.form_submit_button("Salvar", type="primary")
                remove = delete_col.form_submit_button("Remover marcador")
            if save:
                _save_marker(record_store, marker, label, icon)
            if remove:
                try:
                    record_store.delete_marker(marker.key)
                except StoreError:
                    logger.exception("Error deleting marker %r", marker.key)
                    st.error("Erro ao remover marcador.")
                else:
                    st.rerun()

    with st.expander("➕ Novo marcador"):
        with st.form("new_marker", clear_on_submit=True):
            key = st.text_input("Chave", placeholder="Ex: dinheiro")
            label = st.text_input("Nome", placeholder="Ex: Dinheiro")
            icon = st.text_input("Emoji", max_chars=8)
            order = st.number_input("Ordem", min_value=0, step=1, value=len(registry) + 1)
            submitted = st.form_submit_button("Adicionar marcador", type="primary")
        if submitted:
            _add_marker(record_store, key.strip(), label.strip(), icon.strip(), int(order))


def _save_marker(record_store: SQLiteRecordStore, marker: EntryMarker, label: str, icon: str) -> None:
    try:
        record_store.update_marker(marker.key, label=label.strip() or marker.label, icon=icon.strip())
    except StoreError:
        logger.exception("Error updating marker %r", marker.key)
        st.error("Erro ao atualizar marcador.")
    else:
        st.rerun()


def _add_marker(record_store: SQLiteRecordStore, key: str, label: str, icon: str, order: int) -> None:
    if not key or not label:
        st.error("Informe a chave e o nome do marcador.")
        return
    try:
        record_store.insert_marker(EntryMarker(key=key, label=label, icon=icon or None, order=order))
    except ValueError as exc:
        st.error(f"Chave inválida: {exc}")
    except StoreError:
        logger.exception("Error adding marker %r", key)
        st.error("Erro ao adicionar marcador. Verifique se a chave já existe.")
    else:
        st.rerun()


def _render_admin(record_store: SQLiteRecordStore) -> None:
    st.markdown("## Painel Administrativo")
    users_col, markers_col = st.columns([1, 1], gap="large")
    with users_col:
        _render_user_admin(record_store)
    with markers_col:
        _render_marker_admin(record_store)


def _render_sidebar() -> None:
    sidebar = st.sidebar
    user = st.session_state.get("user")
    theme = st.session_state["theme"]

    sidebar.header("MVPfin")
    theme_label = "🌙 Tema escuro" if theme == "light" else "☀️ Tema claro"
    if sidebar.button(theme_label, use_container_width=True):
        st.session_state["theme"] = settings.toggle_theme(theme)
        st.query_params[settings.THEME_KEY] = st.session_state["theme"]
        st.rerun()

    if user is None:
        return

    sidebar.caption(f"Conectado como **{user.name}**")
    view = st.session_state.get("view", "report")
    if view == "report":
        if sidebar.button("🛡️ Acesso Administrativo", use_container_width=True):
            st.session_state["view"] = "admin"
            st.rerun()
    elif sidebar.button("← Voltar ao Relatório", use_container_width=True):
        st.session_state["view"] = "report"
        st.rerun()

    if sidebar.button("Sair", use_container_width=True):
        for key in list(st.session_state.keys()):
            if key != "theme":
                del st.session_state[key]
        st.rerun()


def main() -> None:
    """Render the MVPfin Streamlit application."""

    config = settings.load_config()
    setup_logging(config.app_name, config.log_dir, config.log_level)

    st.set_page_config(
        page_title="Relatório de Culto MVPfin",
        page_icon="📄",
        layout="wide",
    )

    preferences = settings.Preferences(config.preferences_path)
    if "theme" not in st.session_state:
        st.session_state["theme"] = settings.resolve_theme(
            st.query_params.get(settings.THEME_KEY),
            preferences.theme,
        )
    _inject_theme(st.session_state["theme"])

    try:
        record_store = _get_store(str(config.db_path))
    except StoreError:
        logger.exception("Could not open record store at %s", config.db_path)
        st.error("Não foi possível acessar o banco de dados. Tente novamente mais tarde.")
        return

    _render_sidebar()

    st.title("Relatório de Culto MVPfin")
    st.caption("Controle Administrativo Financeiro")

    if st.session_state.get("user") is None:
        _render_login(record_store)
    elif st.session_state.get("view") == "admin":
        _render_admin(record_store)
    else:
        _render_report(record_store, st.session_state["theme"])

    st.divider()
    st.caption(f"© {date.today().year} Relatório de Culto MVPfin • Sistema Administrativo")


if __name__ == "__main__":
    main()

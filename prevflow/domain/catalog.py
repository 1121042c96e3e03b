# SPDX-License-Identifier: Apache-2.0

"""
Static board configuration: columns per view, action zones, transition
rules, reserved tags, default users and automation templates.

These tables are immutable at runtime. The board service receives them by
injection so tests and deployments can swap in their own.
"""

from typing import Dict, List
from ..models.board import ColumnDefinition, ActionZone, TransitionRule, column_titles
from ..models.entities import User
from ..models.settings import SystemTag, INSSAgency
from ..models.enums import ViewType, UrgencyLevel, TransitionType, UserRole
from ..models.workflow import WorkflowRule, AddTaskAction, SetUrgencyAction, AddTagAction


# Reserved tags
TAG_MISSING_DOCS = "Falta Docs"
TAG_PARTIALLY_GRANTED = "PARCIALMENTE PROVIDO"
TAG_TO_RECEIVE = "A RECEBER"
TAG_GRANTED = "CONCEDIDO"
TAG_DENIED = "INDEFERIDO"
TAG_PARTIAL_APPEAL = "RECURSO PARCIAL"
TAG_WRIT = "MANDADO DE SEGURANÇA"
TAG_WRIT_REQUESTED = "MS SOLICITADO"
TAG_WRIT_FILED = "MS IMPETRADO"
TAG_HAS_WRIT = "COM MS"
TAG_URGENT = "URGENTE"

# Zone identifiers
ZONE_JUDICIAL = "zone_judicial"
ZONE_APPEAL = "zone_recurso"
ZONE_WRIT = "zone_ms"
ZONE_DECISION_DESK = "zone_mesa_decisao"
ZONE_ARCHIVE = "zone_arquivo"
ZONE_ADMIN = "zone_admin"

# Columns referenced by transition logic
COL_ADMIN_TRIAGE = "adm_triagem"
COL_ADMIN_PAYMENT = "adm_pagamento"
COL_AUX_PERICIA = "aux_pericia"
COL_JUD_TRIAGE = "jud_triagem"
COL_JUD_PERICIA = "jud_pericia"
COL_APPEAL_TRIAGE = "rec_triagem"
COL_APPEAL_BOARD = "rec_junta"
COL_APPEAL_CHAMBER = "rec_camera"

PERICIA_COLUMNS = frozenset({COL_AUX_PERICIA, COL_JUD_PERICIA})

JUDICIAL_START_TASKS = [
    "Coletar Procuração Judicial",
    "Coletar Contrato de Honorários",
    "Comprovante de Residência Atualizado",
    "Baixar Processo Administrativo (Cópia Integral)",
]

WRIT_DELAY_TASK = "Comprovar Demora (+120 dias)"
PARTIAL_APPEAL_TASK = "Analisar parte indeferida"

SYSTEM_USER = "Sistema"
SYNC_USER = "Sistema (Sync)"
UNKNOWN_USER = "Desconhecido"


def _columns(*pairs) -> List[ColumnDefinition]:
    return [ColumnDefinition(id=column_id, title=title) for column_id, title in pairs]


VIEW_COLUMNS: Dict[str, List[ColumnDefinition]] = {
    ViewType.ADMIN.value: _columns(
        ("adm_triagem", "1. Triagem / Recepção"),
        ("adm_docs", "2. Pendência Docs"),
        ("adm_montagem", "3. Montagem / Cálculo"),
        ("adm_protocolo", "4. Protocolado INSS"),
        ("adm_exigencia", "5. Cumprir Exigência"),
        ("adm_analise", "6. Em Análise"),
        ("adm_concluido", "7. Concluído / Decisão"),
        ("adm_pagamento", "8. Pagamento / PAB"),
    ),
    ViewType.AUX_DOENCA.value: _columns(
        ("aux_chegada", "1. Recepção / Triagem"),
        ("aux_agendamento", "2. Agendar Perícia"),
        ("aux_pericia", "3. Aguardando Perícia"),
        ("aux_resultado", "4. Aguardando Resultado"),
        ("aux_ativo", "5. Benefício Ativo"),
        ("aux_prorrogacao", "6. Prorrogação (PP)"),
        ("aux_indeferido", "7. Indeferido / Recurso"),
    ),
    ViewType.RECURSO_ADM.value: _columns(
        ("rec_triagem", "1. Análise de Viabilidade"),
        ("rec_redacao", "2. Redação do Recurso"),
        ("rec_junta", "3. Protocolo JR (1ª Inst.)"),
        ("rec_exigencia", "4. Exigência / Diligência"),
        ("rec_camera", "5. Protocolo CAJ (2ª Inst.)"),
        ("rec_resultado", "6. Resultado Final"),
    ),
    ViewType.JUDICIAL.value: _columns(
        ("jud_triagem", "1. Triagem Judicial"),
        ("jud_inicial", "2. Redação Inicial"),
        ("jud_protocolo", "3. Aguardando Citação"),
        ("jud_pericia", "4. Perícia Judicial"),
        ("jud_audiencia", "5. Audiência"),
        ("jud_sentenca", "6. Sentença / Acórdão"),
        ("jud_transito", "7. Trânsito em Julgado"),
        ("jud_cumprimento", "8. Cumprimento Sentença"),
        ("jud_rpv", "9. RPV / Precatório"),
    ),
    ViewType.MESA_DECISAO.value: _columns(
        ("mesa_aguardando", "Aguardando Análise"),
        ("mesa_analise", "Em Análise"),
        ("mesa_definido", "Estratégia Definida"),
    ),
    ViewType.ARCHIVED.value: _columns(
        ("arq_geral", "Arquivo Geral"),
    ),
}

COLUMN_TITLES: Dict[str, str] = column_titles(VIEW_COLUMNS)


ACTION_ZONES: List[ActionZone] = [
    ActionZone(
        id=ZONE_JUDICIAL,
        label="Judicializar",
        sub_label="Mover para o Judicial",
        target_view=ViewType.JUDICIAL,
        target_column_id=COL_JUD_TRIAGE,
        active_in_views=[ViewType.ADMIN, ViewType.RECURSO_ADM, ViewType.AUX_DOENCA, ViewType.MESA_DECISAO],
        confirmation_title="Judicializar Processo",
        confirmation_description=(
            "Isso moverá o caso para o fluxo Judicial, criará tarefas de coleta "
            "e mudará a urgência para Alta. Confirmar?"
        ),
        seed_urgency=UrgencyLevel.HIGH,
        seed_judicial_tasks=True,
        seed_responsible_id="u2",
    ),
    ActionZone(
        id=ZONE_APPEAL,
        label="Recurso Adm.",
        sub_label="Iniciar Fase Recursal",
        target_view=ViewType.RECURSO_ADM,
        target_column_id=COL_APPEAL_TRIAGE,
        active_in_views=[ViewType.ADMIN, ViewType.AUX_DOENCA],
        confirmation_title="Enviar para Recurso",
        confirmation_description="O processo será movido para o fluxo de Recurso Administrativo.",
        seed_responsible_id="u1",
    ),
    ActionZone(
        id=ZONE_WRIT,
        label="Mandado de Segurança",
        sub_label="Impetrar MS",
        target_view=ViewType.JUDICIAL,
        target_column_id=COL_JUD_TRIAGE,
        active_in_views=[ViewType.ADMIN, ViewType.RECURSO_ADM],
        confirmation_title="Impetrar Mandado de Segurança",
        confirmation_description=(
            "Isso criará uma CÓPIA do processo no Judicial para o MS, mantendo "
            "o original no Administrativo. Confirmar?"
        ),
        is_dangerous=True,
        clones_case=True,
    ),
    ActionZone(
        id=ZONE_DECISION_DESK,
        label="Mesa de Decisão",
        sub_label="Definição Estratégica",
        target_view=ViewType.MESA_DECISAO,
        target_column_id="mesa_aguardando",
        active_in_views=[ViewType.ADMIN, ViewType.RECURSO_ADM, ViewType.AUX_DOENCA, ViewType.JUDICIAL],
        confirmation_title="Enviar p/ Mesa de Decisão",
        confirmation_description="Enviar para análise estratégica do advogado sênior?",
    ),
    ActionZone(
        id=ZONE_ARCHIVE,
        label="Arquivar",
        sub_label="Encerrar ou Financeiro",
        target_view=ViewType.ARCHIVED,
        target_column_id="arq_geral",
        active_in_views="ALL",
        confirmation_title="Arquivar Processo",
        confirmation_description="Isso removerá o processo das visões ativas. Deseja arquivar?",
        is_dangerous=True,
    ),
    ActionZone(
        id=ZONE_ADMIN,
        label="Retornar p/ Admin",
        sub_label="Voltar ao Fluxo Inicial",
        target_view=ViewType.ADMIN,
        target_column_id=COL_ADMIN_TRIAGE,
        active_in_views=[ViewType.JUDICIAL, ViewType.RECURSO_ADM, ViewType.MESA_DECISAO, ViewType.ARCHIVED],
        confirmation_title="Retornar ao Administrativo",
        confirmation_description="O processo voltará para o início do fluxo administrativo. Confirmar?",
        seed_responsible_id="u3",
    ),
]


def _rule(source: str, target: str, transition_type: TransitionType) -> TransitionRule:
    return TransitionRule(**{"from": source, "to": target, "type": transition_type})


# Declaration order matters: the first match wins.
TRANSITION_RULES: List[TransitionRule] = [
    _rule("*", "adm_protocolo", TransitionType.PROTOCOL_INSS),
    _rule("*", "aux_agendamento", TransitionType.PROTOCOL_INSS),
    _rule("*", "aux_pericia", TransitionType.PROTOCOL_INSS),
    _rule("*", "jud_protocolo", TransitionType.PROTOCOL_INSS),
    _rule("*", "rec_junta", TransitionType.PROTOCOL_APPEAL),
    _rule("*", "rec_camera", TransitionType.PROTOCOL_APPEAL),
    _rule("*", "adm_exigencia", TransitionType.DEADLINE),
    _rule("*", "rec_exigencia", TransitionType.DEADLINE),
    _rule("*", "adm_docs", TransitionType.PENDENCY),
    _rule("*", "adm_concluido", TransitionType.CONCLUSION_NB),
    _rule("*", "aux_resultado", TransitionType.CONCLUSION_NB),
    _rule("rec_junta", "rec_triagem", TransitionType.APPEAL_RETURN),
    _rule("rec_junta", "adm_triagem", TransitionType.ADMIN_RETURN),
]


DEFAULT_USERS: List[User] = [
    User(id="u1", name="Dr. Maurícius", role=UserRole.LAWYER),
    User(id="u2", name="Dra. Ana", role=UserRole.LAWYER),
    User(id="u3", name="Secretaria", role=UserRole.SECRETARY),
    User(id="u4", name="Financeiro", role=UserRole.FINANCIAL),
]

DEFAULT_SYSTEM_TAGS: List[SystemTag] = [
    SystemTag(id="tag_1", label="Prioridade", color_bg="bg-red-100", color_text="text-red-700"),
    SystemTag(id="tag_2", label="Rural", color_bg="bg-amber-100", color_text="text-amber-800"),
    SystemTag(id="tag_3", label="Acidente Trabalho", color_bg="bg-orange-100", color_text="text-orange-700"),
    SystemTag(id="tag_4", label=TAG_MISSING_DOCS, color_bg="bg-yellow-100", color_text="text-yellow-800"),
    SystemTag(id="tag_5", label="Complexo", color_bg="bg-purple-100", color_text="text-purple-700"),
    SystemTag(id="tag_6", label="Revisão", color_bg="bg-blue-100", color_text="text-blue-700"),
    SystemTag(id="tag_7", label=TAG_GRANTED, color_bg="bg-emerald-100", color_text="text-emerald-700"),
    SystemTag(id="tag_8", label=TAG_DENIED, color_bg="bg-red-100", color_text="text-red-700"),
]

DEFAULT_INSS_AGENCIES: List[INSSAgency] = [
    INSSAgency(id="aps_1", name="APS Cruz Alta", address="Rua Voluntários da Pátria, 100"),
    INSSAgency(id="aps_2", name="APS Ijuí", address="Rua do Comércio, 500"),
    INSSAgency(id="aps_3", name="APS Santa Maria", address="Rua Venâncio Aires, 200"),
    INSSAgency(id="aps_4", name="APS Panambi", address="Rua 7 de Setembro, 300"),
]

DEFAULT_WORKFLOW_RULES: List[WorkflowRule] = []

# Ready-made rules offered by the automation settings screen; inactive
# until an office enables a copy.
AUTOMATION_TEMPLATES: List[WorkflowRule] = [
    WorkflowRule(
        id="tpl_welcome",
        name="Boas Vindas Automático",
        target_column_id=COL_ADMIN_TRIAGE,
        actions=[AddTaskAction(payload="Enviar mensagem de boas vindas")],
    ),
    WorkflowRule(
        id="tpl_denied_urgency",
        name="Urgência em Indeferidos",
        target_column_id="aux_indeferido",
        actions=[
            SetUrgencyAction(payload=UrgencyLevel.HIGH),
            AddTagAction(payload=TAG_DENIED),
        ],
    ),
]


def columns_for_view(view: str) -> List[ColumnDefinition]:
    """Columns of a board, in display order."""
    return VIEW_COLUMNS.get(view, [])


def find_view_for_column(column_id: str) -> str:
    """
    View owning a column.

    Raises:
        KeyError: If no view declares the column
    """
    for view, columns in VIEW_COLUMNS.items():
        if any(column.id == column_id for column in columns):
            return view
    raise KeyError(column_id)


def users_by_id(users: List[User]) -> Dict[str, User]:
    """Index users by id."""
    return {user.id: user for user in users}

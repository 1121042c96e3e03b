# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the transition executor.
"""

from prevflow.domain.transitions import (
    ADMIN_RETURN_LOG,
    TRANSITION_HANDLERS,
    derive_return_internal_id,
    execute_transition,
)
from prevflow.models.entities import CaseFile, CaseHistoryItem
from prevflow.models.enums import TransitionType
from prevflow.models.requests import TransitionFormData


def _run(case, transition_type, target, actor, fixed_now, users=None, cases=None, **form):
    return execute_transition(
        case,
        transition_type,
        target,
        TransitionFormData(**form),
        actor,
        users=users,
        cases=cases,
        now=fixed_now,
    )


class TestExecutorBasics:
    """Test preconditions and dispatch."""

    def test_every_type_has_handler(self):
        assert set(TRANSITION_HANDLERS) == set(TransitionType)

    def test_missing_case_is_noop(self, actor, fixed_now):
        assert _run(None, TransitionType.PENDENCY, "adm_docs", actor, fixed_now) is None

    def test_missing_actor_is_noop(self, sample_case, fixed_now):
        assert _run(sample_case, TransitionType.PENDENCY, "adm_docs", None, fixed_now) is None

    def test_accepts_type_value(self, sample_case, actor, fixed_now):
        outcome = _run(sample_case, "PENDENCY", "adm_docs", actor, fixed_now, missing_docs=["RG"])
        assert outcome.updates["missing_docs"] == ["RG"]


class TestPendency:

    def test_missing_docs_add_tag(self, sample_case, actor, fixed_now):
        outcome = _run(sample_case, TransitionType.PENDENCY, "adm_docs", actor, fixed_now,
                       missing_docs=["RG", "CNIS"])

        assert outcome.updates["missing_docs"] == ["RG", "CNIS"]
        assert outcome.updates["tags"] == ["Falta Docs"]
        assert outcome.log == "Pendências atualizadas. Itens: RG, CNIS"
        assert outcome.target_column_id == "adm_docs"

    def test_tag_not_duplicated(self, make_case, actor, fixed_now):
        case = make_case(tags=["Falta Docs"])
        outcome = _run(case, TransitionType.PENDENCY, "adm_docs", actor, fixed_now, missing_docs=["RG"])

        assert outcome.updates["tags"] == ["Falta Docs"]

    def test_no_missing_docs(self, sample_case, actor, fixed_now):
        outcome = _run(sample_case, TransitionType.PENDENCY, "adm_docs", actor, fixed_now, missing_docs=[])

        assert outcome.updates["missing_docs"] == []
        assert "tags" not in outcome.updates
        assert outcome.log == "Pendências atualizadas. Itens: Nenhum"


class TestProtocolInss:

    def test_protocol(self, sample_case, actor, fixed_now):
        outcome = _run(sample_case, TransitionType.PROTOCOL_INSS, "adm_protocolo", actor, fixed_now,
                       protocol_number="4455", protocol_date="2024-03-05")

        assert outcome.updates == {"protocol_number": "4455", "protocol_date": "2024-03-05"}
        assert outcome.log == "Protocolo registrado: 4455"

    def test_hearing_scheduled(self, sample_case, actor, fixed_now):
        outcome = _run(sample_case, TransitionType.PROTOCOL_INSS, "aux_pericia", actor, fixed_now,
                       pericia_date="2024-03-01", pericia_location="APS Cruz Alta")

        assert outcome.updates == {"pericia_date": "2024-03-01", "pericia_location": "APS Cruz Alta"}
        assert outcome.log == "Perícia agendada para 01/03/2024."

    def test_judicial_hearing(self, make_case, actor, fixed_now):
        case = make_case(view="JUDICIAL", column_id="jud_protocolo")
        outcome = _run(case, TransitionType.PROTOCOL_INSS, "jud_pericia", actor, fixed_now,
                       pericia_date="2024-05-20", pericia_location="Fórum")

        assert outcome.updates["pericia_location"] == "Fórum"


class TestProtocolAppeal:

    def test_ordinary_appeal(self, make_case, actor, fixed_now):
        case = make_case(view="RECURSO_ADM", column_id="rec_redacao")
        outcome = _run(case, TransitionType.PROTOCOL_APPEAL, "rec_junta", actor, fixed_now,
                       appeal_ordinario_protocol="RO-1", appeal_ordinario_date="2024-03-08")

        assert outcome.updates == {
            "appeal_ordinario_protocol": "RO-1",
            "appeal_ordinario_date": "2024-03-08",
            "appeal_ordinario_status": "AGUARDANDO",
        }
        assert outcome.log == "Recurso Ordinário interposto."

    def test_special_appeal(self, make_case, actor, fixed_now):
        case = make_case(view="RECURSO_ADM", column_id="rec_exigencia")
        outcome = _run(case, TransitionType.PROTOCOL_APPEAL, "rec_camera", actor, fixed_now,
                       appeal_especial_protocol="RE-9", appeal_especial_date="2024-03-09")

        assert outcome.updates["appeal_especial_protocol"] == "RE-9"
        assert outcome.updates["appeal_especial_status"] == "AGUARDANDO"


class TestAppealReturnAndDeadline:

    def test_appeal_return(self, make_case, actor, fixed_now):
        case = make_case(view="RECURSO_ADM", column_id="rec_junta")
        outcome = _run(case, TransitionType.APPEAL_RETURN, "rec_triagem", actor, fixed_now,
                       appeal_decision_date="2024-03-01", appeal_outcome="PROVIDO")

        assert outcome.updates == {"appeal_decision_date": "2024-03-01", "appeal_outcome": "PROVIDO"}
        assert outcome.log == "Retorno de Recurso. Resultado: PROVIDO"

    def test_deadline(self, sample_case, actor, fixed_now):
        outcome = _run(sample_case, TransitionType.DEADLINE, "adm_exigencia", actor, fixed_now,
                       deadline_start="2024-03-10", deadline_end="2024-04-09",
                       exigency_details="Apresentar CTPS")

        assert outcome.updates["exigency_details"] == "Apresentar CTPS"
        assert outcome.log == "Exigência aberta. Prazo fatal: 09/04/2024"


class TestConclusion:

    def test_partial_splits_case(self, make_case, actor, fixed_now):
        case = make_case(
            column_id="adm_analise",
            tags=["Rural"],
            files=[CaseFile(name="rg.pdf")],
            history=[CaseHistoryItem(user="Secretaria", action="Criação", details="Ficha criada no sistema.")],
        )
        outcome = _run(case, TransitionType.CONCLUSION_NB, "adm_concluido", actor, fixed_now,
                       outcome="PARTIAL", benefit_number="NB123", benefit_date="2024-03-01",
                       dcb_date="2024-09-01", deadline_end="2024-03-31")

        assert outcome.target_column_id == "adm_pagamento"
        assert outcome.target_view == "ADMIN"
        assert outcome.updates["tags"] == ["Rural", "PARCIALMENTE PROVIDO", "A RECEBER"]
        assert outcome.updates["urgency"] == "HIGH"
        assert outcome.updates["dcb_date"] == "2024-09-01"

        assert len(outcome.derived_cases) == 1
        child = outcome.derived_cases[0]
        assert child.parent_case_id == case.id
        assert child.internal_id == "2024.001R"
        assert child.view == "RECURSO_ADM"
        assert child.column_id == "rec_triagem"
        assert child.deadline_start == "2024-03-01"
        assert child.deadline_end == "2024-03-31"
        assert set(child.tags) == {"RECURSO PARCIAL", "INDEFERIDO"}
        assert child.benefit_number is None
        assert [task.text for task in child.tasks] == ["Analisar parte indeferida"]
        assert [f.name for f in child.files] == ["rg.pdf"]
        assert len(child.history) == 2

    def test_partial_child_history_is_a_copy(self, make_case, actor, fixed_now):
        case = make_case(history=[CaseHistoryItem(user="Secretaria", action="Criação")])
        outcome = _run(case, TransitionType.CONCLUSION_NB, "adm_concluido", actor, fixed_now,
                       outcome="PARTIAL", benefit_number="NB1", benefit_date="2024-03-01")
        child = outcome.derived_cases[0]

        child.history[0].details = "alterado"
        assert case.history[0].details is None

    def test_partial_tags_deduplicated(self, make_case, actor, fixed_now):
        case = make_case(tags=["A RECEBER"])
        outcome = _run(case, TransitionType.CONCLUSION_NB, "adm_concluido", actor, fixed_now,
                       outcome="PARTIAL", benefit_number="NB1", benefit_date="2024-03-01")

        assert outcome.updates["tags"].count("A RECEBER") == 1

    def test_granted(self, make_case, actor, fixed_now):
        case = make_case(tags=["INDEFERIDO", "Rural"])
        outcome = _run(case, TransitionType.CONCLUSION_NB, "adm_concluido", actor, fixed_now,
                       outcome="GRANTED", benefit_number="NB7", benefit_date="2024-03-01")

        assert outcome.updates["tags"] == ["Rural", "CONCEDIDO"]
        assert outcome.log == "Concessão Registrada. NB: NB7"
        assert outcome.derived_cases == []

    def test_granted_to_payment(self, sample_case, actor, fixed_now):
        outcome = _run(sample_case, TransitionType.CONCLUSION_NB, "adm_pagamento", actor, fixed_now,
                       outcome="GRANTED", benefit_number="NB7")

        assert outcome.updates["tags"] == ["CONCEDIDO", "A RECEBER"]

    def test_denied(self, make_case, actor, fixed_now):
        case = make_case(tags=["CONCEDIDO"])
        outcome = _run(case, TransitionType.CONCLUSION_NB, "adm_concluido", actor, fixed_now,
                       outcome="DENIED", deadline_end="2024-04-01")

        assert outcome.updates["tags"] == ["INDEFERIDO"]
        assert outcome.updates["deadline_end"] == "2024-04-01"
        assert outcome.log == "Indeferimento Registrado. Prazo Recursal: 01/04/2024"

    def test_denied_deadline_from_decision_date(self, sample_case, actor, fixed_now):
        outcome = _run(sample_case, TransitionType.CONCLUSION_NB, "adm_concluido", actor, fixed_now,
                       outcome="DENIED", benefit_date="2024-03-01")

        assert outcome.updates["deadline_end"] == "2024-03-31"


class TestAdminReturn:

    def test_derive_internal_id(self):
        assert derive_return_internal_id("2024.010") == "2024.010-R"
        assert derive_return_internal_id("2024.010-R") == "2024.010-R2"

    def test_clone_terminates(self, make_case, actor, fixed_now):
        case = make_case(
            internal_id="2024.010",
            view="RECURSO_ADM",
            column_id="rec_junta",
            benefit_number="NB1",
            deadline_end="2024-02-01",
            tags=["Rural"],
        )
        outcome = _run(case, TransitionType.ADMIN_RETURN, "adm_triagem", actor, fixed_now,
                       return_mode="CLONE", protocol_number="999", protocol_date="2024-03-10")

        assert outcome.terminated is True
        assert outcome.updates == {}
        assert outcome.target_column_id == "rec_junta"

        child = outcome.derived_cases[0]
        assert child.internal_id == "2024.010-R"
        assert child.view == "ADMIN"
        assert child.column_id == "adm_triagem"
        assert child.protocol_number == "999"
        assert child.parent_case_id == case.id
        assert child.benefit_number is None
        assert child.deadline_end is None
        assert child.tags == ["Rural"]
        assert child.history[0].details == "Processo derivado de 2024.010. Protocolo: 999"

    def test_clone_without_protocol(self, make_case, actor, fixed_now):
        case = make_case(internal_id="2024.010", view="RECURSO_ADM", column_id="rec_junta")
        outcome = _run(case, TransitionType.ADMIN_RETURN, "adm_triagem", actor, fixed_now, return_mode="CLONE")

        child = outcome.derived_cases[0]
        assert child.protocol_number is None
        assert child.history[0].details == "Processo derivado de 2024.010. Protocolo: N/A"

    def test_move(self, make_case, actor, fixed_now):
        case = make_case(view="RECURSO_ADM", column_id="rec_junta")
        outcome = _run(case, TransitionType.ADMIN_RETURN, "adm_triagem", actor, fixed_now, return_mode="MOVE")

        assert outcome.terminated is False
        assert outcome.target_column_id == "adm_triagem"
        assert outcome.target_view == "ADMIN"
        assert outcome.updates["view"] == "ADMIN"
        assert outcome.log == ADMIN_RETURN_LOG


class TestReassignment:

    def test_new_responsible(self, sample_case, actor, users, fixed_now):
        outcome = _run(sample_case, TransitionType.PROTOCOL_INSS, "adm_protocolo", actor, fixed_now,
                       users=users, protocol_number="1", new_responsible_id="u2")

        assert outcome.updates["responsible_id"] == "u2"
        assert outcome.updates["responsible_name"] == "Dra. Ana"
        assert outcome.log == "Protocolo registrado: 1 | Responsável alterado para Dra. Ana"

    def test_same_responsible_ignored(self, sample_case, actor, users, fixed_now):
        outcome = _run(sample_case, TransitionType.PROTOCOL_INSS, "adm_protocolo", actor, fixed_now,
                       users=users, protocol_number="1", new_responsible_id="u3")

        assert "responsible_id" not in outcome.updates

    def test_unknown_responsible(self, sample_case, actor, fixed_now):
        outcome = _run(sample_case, TransitionType.PROTOCOL_INSS, "adm_protocolo", actor, fixed_now,
                       protocol_number="1", new_responsible_id="ghost")

        assert outcome.updates["responsible_name"] == "Desconhecido"


class TestIncidentalFiling:

    def test_writ_child_requests_sync(self, make_case, actor, fixed_now):
        parent = make_case(id="p1", tags=["MS SOLICITADO"])
        child = make_case(id="c_ms", parent_case_id="p1", tags=["MANDADO DE SEGURANÇA"],
                          view="JUDICIAL", column_id="jud_inicial")
        outcome = _run(child, TransitionType.PROTOCOL_INSS, "jud_protocolo", actor, fixed_now,
                       cases={"p1": parent}, protocol_number="12345", protocol_date="2024-01-10")

        filing = outcome.incidental_filing
        assert filing.parent_case_id == "p1"
        assert filing.npu == "12345"
        assert filing.filing_date == "2024-01-10"

    def test_request_tag_also_triggers(self, make_case, actor, fixed_now):
        parent = make_case(id="p1")
        child = make_case(id="c_ms", parent_case_id="p1", tags=["MS SOLICITADO"])
        outcome = _run(child, TransitionType.PROTOCOL_INSS, "adm_protocolo", actor, fixed_now,
                       cases={"p1": parent})

        assert outcome.incidental_filing.npu == "N/A"
        assert outcome.incidental_filing.filing_date == fixed_now.isoformat()

    def test_unknown_parent(self, make_case, actor, fixed_now):
        child = make_case(id="c_ms", parent_case_id="p1", tags=["MANDADO DE SEGURANÇA"])
        outcome = _run(child, TransitionType.PROTOCOL_INSS, "adm_protocolo", actor, fixed_now,
                       cases={}, protocol_number="1")

        assert outcome.incidental_filing is None

    def test_untagged_case(self, make_case, actor, fixed_now):
        parent = make_case(id="p1")
        child = make_case(id="c2", parent_case_id="p1")
        outcome = _run(child, TransitionType.PROTOCOL_INSS, "adm_protocolo", actor, fixed_now,
                       cases={"p1": parent}, protocol_number="1")

        assert outcome.incidental_filing is None

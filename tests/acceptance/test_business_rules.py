# SPDX-License-Identifier: Apache-2.0

"""
Business rule enforcement acceptance tests.

Walks cases through the boards end to end and checks the rules the office
relies on: vetoes leave no trace, partial decisions split the case, tags
never duplicate, history only grows, and derived cases never alter their
source.
"""

import pytest

from prevflow.models.requests import TransitionFormData
from prevflow.models.workflow import AddTagAction, BlockMoveAction, WorkflowRule
from prevflow.services.board import MoveStatus


class TestTransitionScenarios:
    """Typed transitions completed through the HTTP API and the service."""

    def test_hearing_scheduled_on_sickness_board(self, test_client, store, new_case):
        new_case()
        headers = {'X-User-Id': 'u1'}

        moved = test_client.post('/api/cases/c1/move', json={'targetId': 'aux_pericia'}, headers=headers)
        assert moved.status_code == 202
        assert moved.get_json()['transitionType'] == 'PROTOCOL_INSS'

        response = test_client.post(
            '/api/cases/c1/transition',
            json={'periciaDate': '2024-03-01', 'periciaLocation': 'APS Cruz Alta'},
            headers=headers
        )
        assert response.status_code == 200

        case = store.get_case('c1')
        assert case.view == 'AUX_DOENCA'
        assert case.column_id == 'aux_pericia'
        assert case.pericia_date == '2024-03-01'
        assert case.pericia_location == 'APS Cruz Alta'
        assert len(case.history) == 1
        assert '01/03/2024' in case.history[0].details

    def test_denial_replaces_granted_tag(self, board, store, new_case, lawyer):
        new_case(column_id='adm_analise', tags=['CONCEDIDO'])

        assert board.request_move('c1', 'adm_concluido', lawyer).status == MoveStatus.PENDING
        board.submit_transition('c1', TransitionFormData(outcome='DENIED', deadline_end='2024-04-01'), lawyer)

        case = store.get_case('c1')
        assert case.tags == ['INDEFERIDO']
        assert case.deadline_end == '2024-04-01'

    def test_writ_filing_updates_parent(self, board, store, new_case, lawyer):
        new_case(id='p1', tags=['MS SOLICITADO'])
        new_case(id='c2', internal_id='2024.002', parent_case_id='p1', tags=['MS SOLICITADO'])

        board.request_move('c2', 'adm_protocolo', lawyer)
        board.submit_transition('c2', TransitionFormData(
            protocol_number='12345', protocol_date='2024-01-10'
        ), lawyer)

        parent = store.get_case('p1')
        assert [writ.npu for writ in parent.mandados_seguranca] == ['12345']
        assert set(parent.tags) == {'MS IMPETRADO', 'COM MS'}

    def test_admin_return_clone_leaves_source_unchanged(self, board, store, new_case, lawyer):
        new_case(internal_id='2024.010', view='RECURSO_ADM', column_id='rec_junta')
        before = store.get_case('c1').to_document()

        board.request_move('c1', 'adm_triagem', lawyer)
        outcome = board.submit_transition('c1', TransitionFormData(return_mode='CLONE', protocol_number='999'), lawyer)

        assert outcome.status == MoveStatus.CLONED
        child = store.get_case(outcome.derived_case_ids[0])
        assert child.internal_id == '2024.010-R'
        assert child.view == 'ADMIN'
        assert child.column_id == 'adm_triagem'
        assert child.protocol_number == '999'
        assert store.get_case('c1').to_document() == before


class TestBoardProperties:
    """Rules that hold for every move."""

    def test_noop_drop_leaves_no_trace(self, board, store, new_case, lawyer):
        new_case()

        with pytest.MonkeyPatch.context() as mp:
            calls = []
            mp.setattr(store, 'save_case', lambda case: calls.append(case))
            outcome = board.request_move('c1', 'adm_triagem', lawyer)

        assert outcome.status == MoveStatus.NOOP
        assert calls == []
        assert store.get_case('c1').history == []

    @pytest.mark.parametrize('form', [
        TransitionFormData(missing_docs=['RG']),
        TransitionFormData(missing_docs=[]),
        TransitionFormData(missing_docs=['CNIS'], new_responsible_id='u2'),
    ])
    def test_veto_is_atomic(self, board, settings, store, new_case, lawyer, form):
        new_case(tags=['Rural'])
        settings.set_workflow_rules([WorkflowRule(
            name='Docs',
            target_column_id='adm_docs',
            actions=[AddTagAction(payload='Complexo'), BlockMoveAction(payload='Conferir documentos')],
        )])
        before = store.get_case('c1')

        board.request_move('c1', 'adm_docs', lawyer)
        outcome = board.submit_transition('c1', form, lawyer)

        after = store.get_case('c1')
        assert outcome.status == MoveStatus.BLOCKED
        assert after.column_id == before.column_id
        assert after.tags == before.tags
        assert len(after.history) == len(before.history)

    def test_partial_decision_splits_case(self, board, store, new_case, lawyer):
        new_case(column_id='adm_analise')

        board.request_move('c1', 'adm_concluido', lawyer)
        outcome = board.submit_transition('c1', TransitionFormData(
            outcome='PARTIAL', benefit_number='NB1', benefit_date='2024-03-01'
        ), lawyer)

        children = [case for case in store.list_cases() if case.parent_case_id == 'c1']
        assert len(children) == 1
        assert children[0].id == outcome.derived_case_ids[0]
        assert children[0].view == 'RECURSO_ADM'
        assert 'INDEFERIDO' in children[0].tags

        source = store.get_case('c1')
        assert source.column_id == 'adm_pagamento'
        assert 'A RECEBER' in source.tags

    def test_tags_never_duplicate(self, board, settings, store, new_case, lawyer):
        new_case(tags=['Falta Docs', 'Rural'])
        settings.set_workflow_rules([WorkflowRule(
            name='Rural',
            target_column_id='adm_docs',
            actions=[AddTagAction(payload='Rural'), AddTagAction(payload='Falta Docs')],
        )])

        board.request_move('c1', 'adm_docs', lawyer)
        board.submit_transition('c1', TransitionFormData(missing_docs=['RG']), lawyer)

        tags = store.get_case('c1').tags
        assert len(tags) == len(set(tags))
        assert set(tags) == {'Falta Docs', 'Rural'}

    def test_history_only_grows(self, board, store, new_case, lawyer):
        new_case()
        route = ['adm_montagem', 'zone_judicial', 'jud_inicial', 'zone_mesa_decisao', 'mesa_analise']

        previous = store.get_case('c1').history
        for target in route:
            assert board.request_move('c1', target, lawyer).status == MoveStatus.MOVED
            history = store.get_case('c1').history
            assert len(history) >= len(previous) + 1
            assert [item.id for item in history[:len(previous)]] == [item.id for item in previous]
            previous = history

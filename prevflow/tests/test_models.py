# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for Pydantic models.
"""

import pytest
from pydantic import TypeAdapter, ValidationError

from prevflow.models.board import ActionZone, TransitionRule
from prevflow.models.entities import Case, Notification, Task
from prevflow.models.enums import TransitionType, ViewType
from prevflow.models.requests import MoveRequest, TransitionFormData
from prevflow.models.settings import DocumentTemplate
from prevflow.models.workflow import (
    AddTagAction,
    BlockMoveAction,
    FieldEmptyCondition,
    WorkflowAction,
    WorkflowCondition,
    WorkflowRule,
)


class TestCaseModel:
    """Test Case model validation and wire format."""

    def test_valid_case(self, sample_case):
        """Test valid case creation with defaults."""
        assert sample_case.urgency == "NORMAL"
        assert sample_case.tags == []
        assert sample_case.history == []
        assert sample_case.parent_case_id is None

    def test_camel_case_document(self, sample_case):
        """Test documents use camelCase keys and omit empty optionals."""
        document = sample_case.to_document()

        assert document["internalId"] == "2024.001"
        assert document["columnId"] == "adm_triagem"
        assert document["view"] == "ADMIN"
        assert "protocolNumber" not in document

    def test_populate_from_camel_case(self, sample_case):
        """Test a stored document validates back into a case."""
        restored = Case.model_validate(sample_case.to_document())
        assert restored.to_document() == sample_case.to_document()

    def test_blank_client_name_rejected(self, make_case):
        """Test blank client name validation."""
        with pytest.raises(ValidationError) as exc_info:
            make_case(client_name="   ")

        assert "Field cannot be empty" in str(exc_info.value)

    def test_case_cannot_be_its_own_parent(self, make_case):
        """Test lineage validation."""
        with pytest.raises(ValidationError) as exc_info:
            make_case(parent_case_id="c1")

        assert "Case cannot be parent of itself" in str(exc_info.value)

    def test_invalid_urgency_rejected(self, make_case):
        with pytest.raises(ValidationError):
            make_case(urgency="PANIC")

    def test_has_tag(self, make_case):
        case = make_case(tags=["URGENTE"])
        assert case.has_tag("URGENTE")
        assert not case.has_tag("CONCEDIDO")


class TestEntityDefaults:
    """Test generated identifiers and defaults."""

    def test_task_identifier_prefix(self):
        task = Task(text="Juntar CNIS")
        assert task.id.startswith("t_")
        assert task.completed is False

    def test_notification_defaults(self):
        notification = Notification(title="Movimentação")
        assert notification.type == "INFO"
        assert notification.is_read is False
        assert notification.id.startswith("n_")

    def test_template_category_default(self):
        template = DocumentTemplate(title="Procuração")
        assert template.category == "OUTROS"
        assert template.id.startswith("tpl_")


class TestBoardModels:
    """Test board configuration models."""

    def test_transition_rule_aliases(self):
        """Test transition rules accept the from/to wire names."""
        rule = TransitionRule(**{"from": "*", "to": "adm_docs", "type": "PENDENCY"})

        assert rule.from_column == "*"
        assert rule.type == TransitionType.PENDENCY
        assert rule.matches("adm_triagem", "adm_docs")
        assert not rule.matches("adm_triagem", "adm_protocolo")

    def test_transition_rule_specific_source(self):
        rule = TransitionRule(**{"from": "rec_junta", "to": "rec_triagem", "type": "APPEAL_RETURN"})

        assert rule.matches("rec_junta", "rec_triagem")
        assert not rule.matches("rec_redacao", "rec_triagem")

    def test_blank_column_rejected(self):
        with pytest.raises(ValidationError):
            TransitionRule(**{"from": " ", "to": "adm_docs", "type": "PENDENCY"})

    def test_zone_activity(self):
        zone = ActionZone(
            id="zone_x",
            label="X",
            target_view=ViewType.JUDICIAL,
            target_column_id="jud_triagem",
            active_in_views=[ViewType.ADMIN],
        )
        assert zone.is_active_in("ADMIN")
        assert not zone.is_active_in("JUDICIAL")

    def test_zone_active_everywhere(self):
        zone = ActionZone(id="zone_y", label="Y", target_view=ViewType.ARCHIVED, target_column_id="arq_geral")
        assert zone.is_active_in("MESA_DECISAO")


class TestWorkflowModels:
    """Test the discriminated unions of workflow rules."""

    def test_condition_discriminator(self):
        condition = TypeAdapter(WorkflowCondition).validate_python({"type": "FIELD_EMPTY", "value": "cpf"})
        assert isinstance(condition, FieldEmptyCondition)

    def test_action_discriminator(self):
        action = TypeAdapter(WorkflowAction).validate_python({"type": "ADD_TAG", "payload": "Rural"})
        assert isinstance(action, AddTagAction)

    def test_unknown_condition_rejected(self):
        with pytest.raises(ValidationError):
            TypeAdapter(WorkflowCondition).validate_python({"type": "RANDOM", "value": "x"})

    def test_urgency_condition_validates_value(self):
        with pytest.raises(ValidationError):
            TypeAdapter(WorkflowCondition).validate_python({"type": "URGENCY_IS", "value": "SOMETIMES"})

    def test_rule_from_document(self):
        rule = WorkflowRule.model_validate({
            "name": "Bloquear sem CPF",
            "targetColumnId": "adm_protocolo",
            "conditions": [{"type": "FIELD_EMPTY", "value": "cpf"}],
            "actions": [{"type": "BLOCK_MOVE", "payload": "CPF obrigatório"}],
        })

        assert rule.is_active is True
        assert rule.trigger == "COLUMN_ENTER"
        assert isinstance(rule.actions[0], BlockMoveAction)

    def test_blank_rule_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            WorkflowRule(name="  ", target_column_id="adm_docs")

        assert "Rule name cannot be empty" in str(exc_info.value)


class TestRequestModels:
    """Test request payload models."""

    def test_move_request_strips_target(self):
        request = MoveRequest.model_validate({"targetId": "  adm_docs "})
        assert request.target_id == "adm_docs"

    def test_move_request_blank_target(self):
        with pytest.raises(ValidationError):
            MoveRequest.model_validate({"targetId": "   "})

    def test_form_drops_blank_missing_docs(self):
        form = TransitionFormData.model_validate({"missingDocs": ["RG", " ", "", "CNIS "]})
        assert form.missing_docs == ["RG", "CNIS"]

    def test_form_blank_identifier_is_absent(self):
        form = TransitionFormData(protocol_number="  ", new_responsible_id="")
        assert form.protocol_number is None
        assert form.new_responsible_id is None

    def test_form_rejects_unknown_outcome(self):
        with pytest.raises(ValidationError):
            TransitionFormData.model_validate({"outcome": "MAYBE"})

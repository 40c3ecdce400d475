import random

import pytest

from adminflow.errors import InvalidStepInputError
from adminflow.models import Step, StepCategory
from adminflow.results import (
    fields_for_category,
    generate_step_result,
    sample_input,
    validate_step_input,
)


@pytest.mark.parametrize("category", list(StepCategory))
def test_sample_input_satisfies_validation(category):
    step = Step(id="s", category=category)
    validate_step_input(step, sample_input(category))


def test_steps_without_category_need_no_input():
    assert fields_for_category(None) == []
    validate_step_input(Step(id="s"), None)


def test_missing_required_fields_are_reported():
    step = Step(id="collect", category=StepCategory.DATA_INPUT)
    with pytest.raises(InvalidStepInputError) as exc_info:
        validate_step_input(step, {"customerName": "  ", "phone": "123"})

    assert exc_info.value.step_id == "collect"
    assert exc_info.value.missing == ["customerName", "email"]


def test_select_value_must_be_an_option():
    step = Step(id="crm", category=StepCategory.API)
    data = sample_input(StepCategory.API)
    data["crmSystem"] = "Dynamics"
    with pytest.raises(InvalidStepInputError, match="CRM System"):
        validate_step_input(step, data)


def test_result_shapes_by_category():
    rng = random.Random(5)
    data = {"customerName": "Sarah", "email": "sarah@example.com"}

    collected = generate_step_result(StepCategory.DATA_INPUT, data, rng)
    assert collected["collected"] == data
    assert "timestamp" in collected

    ai = generate_step_result(StepCategory.AI, data, rng)
    assert 0.7 <= ai["confidence"] <= 1.0
    assert ai["extracted_data"] == data
    assert 500 <= ai["processing_time"] <= 2500

    notification = generate_step_result(StepCategory.NOTIFICATION, None, rng)
    assert notification["sent"] is True
    assert len(notification["message_id"]) == 9

    document = generate_step_result(StepCategory.DOCUMENT, None, rng)
    assert document["format"] == "PDF"

    assert generate_step_result(None, data, rng) == {"processed": True}


def test_results_are_repeatable_with_a_seed():
    first = generate_step_result(StepCategory.API, None, random.Random(9))
    second = generate_step_result(StepCategory.API, None, random.Random(9))
    assert first == second

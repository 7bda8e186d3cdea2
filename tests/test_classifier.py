# -*- coding: utf-8 -*-
"""Tests for the safety classifier."""

import pytest

from docktidy.classifier import (
    ClassifierPolicy,
    Exclusion,
    Reason,
    SafetyClassifier,
    classify_resources,
    matches_label,
)
from docktidy.history import MemoryHistoryStore
from docktidy.models import PruneOptions, ResourceType, RiskLevel

ANON = "f" * 64


@pytest.fixture
def classifier(now):
    return SafetyClassifier(now=now)


class TestExclusions:
    @pytest.mark.parametrize("force", [False, True])
    def test_in_use_is_never_a_candidate(self, classifier, make_resource, force):
        resource = make_resource(in_use=True)
        assert classifier.classify(resource, None, PruneOptions(force=force)) is None
        assert classifier.exclusions[Exclusion.IN_USE] == 1

    @pytest.mark.parametrize("force", [False, True])
    def test_pinned_label_is_never_a_candidate(self, classifier, make_resource, force):
        resource = make_resource(labels={"keep": "yes"})
        options = PruneOptions(force=force, exclude_labels=frozenset({"keep"}))
        assert classifier.classify(resource, None, options) is None
        assert classifier.exclusions[Exclusion.PINNED] == 1

    def test_label_value_must_match_when_given(self, make_resource):
        resource = make_resource(labels={"env": "dev"})
        assert matches_label(resource, ["env=dev"])
        assert not matches_label(resource, ["env=prod"])
        assert matches_label(resource, ["env"])

    def test_too_recent(self, classifier, make_resource):
        resource = make_resource(days_ago=3)
        assert classifier.classify(resource, None, PruneOptions(older_than_days=7)) is None
        assert classifier.exclusions[Exclusion.TOO_RECENT] == 1

    def test_force_overrides_age(self, classifier, make_resource):
        resource = make_resource(days_ago=3)
        candidate = classifier.classify(resource, None, PruneOptions(older_than_days=7, force=True))
        assert candidate is not None
        assert candidate.days_since_use == 3

    def test_history_extends_last_use(self, classifier, make_resource, make_history):
        resource = make_resource(days_ago=100)
        history = make_history(resource, days_ago=2)
        assert classifier.classify(resource, history, PruneOptions(older_than_days=7)) is None

    def test_too_small(self, classifier, make_resource):
        resource = make_resource(size=10)
        assert classifier.classify(resource, None, PruneOptions(min_size_bytes=100)) is None
        assert classifier.exclusions[Exclusion.TOO_SMALL] == 1

    def test_type_filter(self, classifier, make_resource):
        resource = make_resource(resource_type=ResourceType.IMAGE)
        options = PruneOptions(include_types=frozenset({ResourceType.CONTAINER}))
        assert classifier.classify(resource, None, options) is None
        assert classifier.exclusions[Exclusion.TYPE_FILTERED] == 1

    def test_builtin_network(self, classifier, make_resource):
        resource = make_resource(resource_type=ResourceType.NETWORK, name="bridge", size=0)
        assert classifier.classify(resource, None, PruneOptions()) is None
        assert classifier.exclusions[Exclusion.BUILTIN] == 1

    @pytest.mark.parametrize(
        "overrides",
        [{"resource_id": ""}, {"size": None}, {"days_ago": None}],
    )
    def test_unclassifiable(self, classifier, make_resource, overrides):
        resource = make_resource(**overrides)
        assert classifier.classify(resource, None, PruneOptions(force=True)) is None
        assert classifier.exclusions[Exclusion.UNCLASSIFIABLE] == 1


class TestRiskLevels:
    def test_no_history_is_medium(self, classifier, make_resource):
        candidate = classifier.classify(make_resource(), None, PruneOptions())
        assert candidate.risk_level is RiskLevel.MEDIUM
        assert candidate.reason == Reason.NO_HISTORY.value

    def test_dangling_image_long_unused_is_safe(self, classifier, make_resource, make_history):
        resource = make_resource(tags=[])
        candidate = classifier.classify(resource, make_history(resource, days_ago=200), PruneOptions())
        assert candidate.risk_level is RiskLevel.SAFE
        assert candidate.reason == Reason.DANGLING_IMAGE.value

    def test_tagged_image_long_unused_is_medium(self, classifier, make_resource, make_history):
        resource = make_resource(tags=["app:1.0"])
        candidate = classifier.classify(resource, make_history(resource, days_ago=200), PruneOptions())
        assert candidate.risk_level is RiskLevel.MEDIUM
        assert candidate.reason == Reason.IDLE.value

    def test_recently_touched_is_medium(self, classifier, make_resource, make_history):
        resource = make_resource(resource_type=ResourceType.CONTAINER, resource_id="c1")
        candidate = classifier.classify(resource, make_history(resource, days_ago=10), PruneOptions())
        assert candidate.risk_level is RiskLevel.MEDIUM
        assert candidate.reason == Reason.RECENTLY_USED.value

    def test_stopped_container_long_unused_is_safe(self, classifier, make_resource, make_history):
        resource = make_resource(resource_type=ResourceType.CONTAINER, resource_id="c1")
        candidate = classifier.classify(resource, make_history(resource), PruneOptions())
        assert candidate.risk_level is RiskLevel.SAFE
        assert candidate.reason == Reason.STOPPED_CONTAINER.value

    def test_named_volume_is_high(self, classifier, make_resource, make_history):
        resource = make_resource(resource_type=ResourceType.VOLUME, resource_id="pgdata", name="pgdata")
        candidate = classifier.classify(resource, make_history(resource), PruneOptions())
        assert candidate.risk_level is RiskLevel.HIGH
        assert candidate.reason == Reason.NAMED_VOLUME.value

    def test_anonymous_volume_long_unused_is_safe(self, classifier, make_resource, make_history):
        resource = make_resource(resource_type=ResourceType.VOLUME, resource_id=ANON, name=ANON)
        candidate = classifier.classify(resource, make_history(resource), PruneOptions())
        assert candidate.risk_level is RiskLevel.SAFE
        assert candidate.reason == Reason.ANONYMOUS_VOLUME.value

    def test_policy_high_risk_types(self, now, make_resource, make_history):
        classifier = SafetyClassifier(
            ClassifierPolicy(high_risk_types=frozenset({ResourceType.NETWORK})), now=now
        )
        resource = make_resource(resource_type=ResourceType.NETWORK, resource_id="n1", name="app_net", size=0)
        candidate = classifier.classify(resource, make_history(resource), PruneOptions())
        assert candidate.risk_level is RiskLevel.HIGH
        assert candidate.reason == Reason.HIGH_RISK_TYPE.value

    def test_safe_after_days_is_configurable(self, now, make_resource, make_history):
        classifier = SafetyClassifier(ClassifierPolicy(safe_after_days=5), now=now)
        resource = make_resource(tags=[])
        candidate = classifier.classify(resource, make_history(resource, days_ago=10), PruneOptions())
        assert candidate.risk_level is RiskLevel.SAFE

    def test_risk_levels_are_ordered(self):
        assert RiskLevel.SAFE < RiskLevel.MEDIUM < RiskLevel.HIGH
        assert max([RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.SAFE]) is RiskLevel.HIGH


class TestClassifyResources:
    def test_batch(self, now, make_resource, make_history):
        store = MemoryHistoryStore()
        dangling = make_resource(resource_id="img1", size=500)
        store.save_usage_history(make_history(dangling))
        resources = [
            dangling,
            make_resource(resource_id="img2", size=5000),
            make_resource(resource_id="img3", in_use=True),
            make_resource(resource_id="img4", labels={"keep": ""}),
        ]
        options = PruneOptions(exclude_labels=frozenset({"keep"}))

        result = classify_resources(resources, options, store=store, now=now)

        assert result.total_resources == 4
        assert [c.id for c in result.candidates] == ["img1", "img2"]
        assert result.candidates[0].risk_level is RiskLevel.SAFE
        assert result.reclaimable_bytes == 5500
        assert result.exclusions[Exclusion.IN_USE] == 1
        assert result.exclusions[Exclusion.PINNED] == 1
        assert result.unclassifiable == 0

    def test_unclassifiable_is_counted(self, now, make_resource):
        result = classify_resources([make_resource(size=None)], PruneOptions(), now=now)
        assert result.candidates == []
        assert result.unclassifiable == 1

"""Widget catalog: the metric configuration behind every dashboard widget.

Widgets differ only in this data. Each one gets its own engine instance built
from its registry; nothing here is mutated at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from engine.colors import palette_color
from engine.registry import (
    SIZE_TOLERANCES,
    Aggregation,
    ChartShape,
    MetricConfig,
    Polarity,
    Unit,
    ViewConfig,
    ViewRegistry,
    ViewType,
)
from engine.timewindow import DEFAULT_TIME_RANGE, TimeRange

LOWER = Polarity.LOWER_IS_BETTER


@dataclass(frozen=True)
class Widget:
    key: str
    title: str
    registry: ViewRegistry
    page_size: int = 4
    default_time_range: TimeRange = DEFAULT_TIME_RANGE
    date_field: str = "date"


def _counts(*pairs: tuple) -> tuple:
    return tuple(MetricConfig(key=k, label=label) for k, label in pairs)


PR_METRICS = Widget(
    key="pr-metrics",
    title="Pull Request Metrics",
    page_size=3,
    registry=ViewRegistry(
        [
            ViewConfig(
                ViewType.DISTRIBUTION,
                "By Distribution",
                _counts(
                    ("feature", "Feature"),
                    ("enhancement", "Enhancement"),
                    ("bugfix", "Bugfix"),
                    ("refactor", "Refactor"),
                    ("chore", "Chore"),
                    ("security", "Security"),
                    ("documentation", "Documentation"),
                    ("test", "Test"),
                ),
                shape=ChartShape.STACKED_BAR,
                aggregation=Aggregation.TOTAL,
                description="Analyze PR types and distribution",
            ),
            ViewConfig(
                ViewType.STATUS,
                "By PR Status",
                _counts(
                    ("open", "Open"),
                    ("inReview", "In Review"),
                    ("merged", "Merged"),
                    ("closed", "Closed"),
                    ("draft", "Draft"),
                ),
                shape=ChartShape.STACKED_BAR,
                aggregation=Aggregation.TOTAL,
                description="Monitor PR status and lifecycle",
            ),
            ViewConfig(
                ViewType.SIZE,
                "By PR Size",
                _counts(
                    ("xs", "XS (< 50 lines)"),
                    ("s", "S (50-200 lines)"),
                    ("m", "M (200-500 lines)"),
                    ("l", "L (500-1000 lines)"),
                    ("xl", "XL (1000-2000 lines)"),
                    ("xxl", "XXL (> 2000 lines)"),
                ),
                shape=ChartShape.STACKED_BAR,
                aggregation=Aggregation.TOTAL,
                description="Track PR sizes over time",
            ),
            ViewConfig(
                ViewType.LOC,
                "By Lines of Code",
                tuple(
                    MetricConfig(key=k, label=label, unit=Unit.LOC)
                    for k, label in [
                        ("loc", "Lines of Code"),
                        ("additions", "Additions"),
                        ("deletions", "Deletions"),
                        ("netChange", "Net Change"),
                    ]
                ),
                shape=ChartShape.STACKED_BAR,
                aggregation=Aggregation.TOTAL,
                description="Analyze code changes (LOC metrics)",
            ),
        ]
    ),
)

_DEPLOYMENT_CARDS = (
    MetricConfig("deployments", "Deployments"),
    MetricConfig("failures", "Failures", polarity=LOWER),
    MetricConfig("cfr", "Change Failure Rate", unit=Unit.PERCENT, polarity=LOWER),
    MetricConfig("mtr", "Mean Time to Recovery", unit=Unit.HOURS, polarity=LOWER),
)

DEPLOYMENTS = Widget(
    key="deployments",
    title="Deployment Metrics",
    registry=ViewRegistry(
        [
            ViewConfig(
                ViewType.DEPLOYMENT_COUNT,
                "By Count",
                (
                    MetricConfig("successful", "Successful", color=palette_color(1)),
                    MetricConfig("failures", "Failures", color=palette_color(3)),
                ),
                shape=ChartShape.STACKED_BAR,
                card_metrics=_DEPLOYMENT_CARDS,
                description="Track deployment frequency and failure rates",
            ),
            ViewConfig(
                ViewType.DEPLOYMENT_FOCUS,
                "By Focus",
                (
                    MetricConfig("features", "Features", color=palette_color(0)),
                    MetricConfig("security", "Security", color=palette_color(2)),
                    MetricConfig("chores", "Chores", color=palette_color(4)),
                    MetricConfig("documentation", "Documentation", color=palette_color(6)),
                    MetricConfig("bugfixes", "Bugfixes", color=palette_color(8)),
                ),
                shape=ChartShape.STACKED_BAR,
                card_metrics=_DEPLOYMENT_CARDS,
                description="Analyze deployment distribution by type and focus",
            ),
        ]
    ),
)

CYCLE_TIME = Widget(
    key="cycle-time",
    title="Cycle Time",
    registry=ViewRegistry(
        [
            ViewConfig(
                ViewType.CYCLE_TIME,
                "Cycle Time",
                tuple(
                    MetricConfig(k, label, unit=Unit.HOURS, polarity=LOWER)
                    for k, label in [
                        ("codingTime", "Coding Time"),
                        ("pickupTime", "Pickup Time"),
                        ("reviewTime", "Review Time"),
                        ("mergeTime", "Merge Time"),
                    ]
                ),
                description="Track time for code changes through different stages",
            )
        ]
    ),
)

TEAM_GOALS = Widget(
    key="team-goals",
    title="Goals Progress",
    registry=ViewRegistry(
        [
            ViewConfig(
                ViewType.TEAM_GOALS,
                "Team Goals",
                (
                    MetricConfig("productivity", "Productivity", target=85, unit=Unit.PERCENT),
                    MetricConfig("quality", "Code Quality", target=90, unit=Unit.PERCENT),
                    MetricConfig("learning", "Learning & Growth", target=80, unit=Unit.PERCENT),
                    MetricConfig("teamwork", "Team Collaboration", target=85, unit=Unit.PERCENT),
                ),
                description="Track progress towards personal and team goals",
                x_field="tooltipLabel",
            )
        ]
    ),
)

PR_SIZE_GOALS = Widget(
    key="pr-size-goals",
    title="PR Size Goals",
    registry=ViewRegistry(
        [
            ViewConfig(
                ViewType.PR_SIZE_GOALS,
                "PR Size Goals",
                (
                    MetricConfig(
                        "smallPRPercentage",
                        "Small PRs (<200 LOC)",
                        target=80,
                        description="Percentage of PRs under 200 lines of code",
                        unit=Unit.PERCENT,
                    ),
                    MetricConfig(
                        "avgPRSize",
                        "Average PR Size",
                        target=150,
                        description="Average lines of code per PR",
                        polarity=LOWER,
                        unit=Unit.LOC,
                    ),
                    MetricConfig(
                        "reviewTime",
                        "Review Time",
                        target=24,
                        description="Average hours to complete review",
                        polarity=LOWER,
                        unit=Unit.HOURS,
                    ),
                    MetricConfig(
                        "mergeSuccess",
                        "Merge Success Rate",
                        target=95,
                        description="Percentage of PRs merged without conflicts",
                        unit=Unit.PERCENT,
                    ),
                ),
                tolerances=SIZE_TOLERANCES,
                description="Track and improve pull request size metrics",
                x_field="tooltipLabel",
            )
        ]
    ),
)

PR_REVIEW_GOALS = Widget(
    key="pr-review-goals",
    title="PR Review Goals",
    registry=ViewRegistry(
        [
            ViewConfig(
                ViewType.PR_REVIEW_GOALS,
                "PR Review Goals",
                (
                    MetricConfig(
                        "reviewCoverage",
                        "Review Coverage",
                        target=100,
                        description="Percentage of PRs that received at least one review",
                        unit=Unit.PERCENT,
                    ),
                    MetricConfig(
                        "reviewerCount",
                        "Reviewers per PR",
                        target=2,
                        description="Average number of reviewers per pull request",
                        unit=Unit.RATIO,
                    ),
                    MetricConfig(
                        "timeToFirstReview",
                        "Time to First Review",
                        target=4,
                        description="Average hours until first review comment",
                        polarity=LOWER,
                        unit=Unit.HOURS,
                    ),
                    MetricConfig(
                        "approvalRate",
                        "Approval Rate",
                        target=90,
                        description="Percentage of PRs approved on first review",
                        unit=Unit.PERCENT,
                    ),
                ),
                description="Track and improve pull request review process",
                x_field="tooltipLabel",
            )
        ]
    ),
)

PR_REVIEW_TIME_GOALS = Widget(
    key="pr-review-time-goals",
    title="PR Review Time Goals",
    registry=ViewRegistry(
        [
            ViewConfig(
                ViewType.PR_REVIEW_TIME_GOALS,
                "PR Review Time Goals",
                (
                    MetricConfig(
                        "reviewCompletionTime",
                        "Review Completion Time",
                        target=24,
                        description="Average hours to complete full review cycle",
                        polarity=LOWER,
                        unit=Unit.HOURS,
                    ),
                    MetricConfig(
                        "staleReviewRate",
                        "Stale Review Rate",
                        target=5,
                        description="Percentage of reviews not completed within 24 hours",
                        polarity=LOWER,
                        unit=Unit.PERCENT,
                    ),
                    MetricConfig(
                        "iterationCount",
                        "Review Iterations",
                        target=2,
                        description="Average number of review cycles before approval",
                        polarity=LOWER,
                        unit=Unit.RATIO,
                    ),
                    MetricConfig(
                        "firstPassRate",
                        "First-Pass Success",
                        target=70,
                        description="Percentage of PRs approved on first review",
                        unit=Unit.PERCENT,
                    ),
                ),
                description="Track and improve pull request review completion time",
                x_field="tooltipLabel",
            )
        ]
    ),
)

PR_PICKUP_GOALS = Widget(
    key="pr-pickup-goals",
    title="PR Pickup Goals",
    registry=ViewRegistry(
        [
            ViewConfig(
                ViewType.PR_PICKUP_GOALS,
                "PR Pickup Goals",
                (
                    MetricConfig(
                        "pickupTime",
                        "Pickup Time",
                        target=12,
                        description="Average hours until PR is picked up for review",
                        polarity=LOWER,
                        unit=Unit.HOURS,
                    ),
                    MetricConfig(
                        "staleRate",
                        "Stale PR Rate",
                        target=5,
                        description="Percentage of PRs not picked up within 12 hours",
                        polarity=LOWER,
                        unit=Unit.PERCENT,
                    ),
                    MetricConfig(
                        "assigneePickupRate",
                        "Assignee Pickup Rate",
                        target=90,
                        description="Percentage of PRs picked up by assigned reviewers",
                        unit=Unit.PERCENT,
                    ),
                    MetricConfig(
                        "teamResponseTime",
                        "Team Response Time",
                        target=4,
                        description="Average hours until any team interaction",
                        polarity=LOWER,
                        unit=Unit.HOURS,
                    ),
                ),
                description="Track and improve pull request pickup time and responsiveness",
                x_field="tooltipLabel",
            )
        ]
    ),
)

PR_MERGE_TIME_GOALS = Widget(
    key="pr-merge-time-goals",
    title="PR Merge Time Goals",
    registry=ViewRegistry(
        [
            ViewConfig(
                ViewType.PR_MERGE_TIME_GOALS,
                "PR Merge Time Goals",
                (
                    MetricConfig(
                        "mergeTime",
                        "Merge Time",
                        target=48,
                        description="Average hours from PR creation to merge",
                        polarity=LOWER,
                        unit=Unit.HOURS,
                    ),
                    MetricConfig(
                        "staleMergeRate",
                        "Stale Merge Rate",
                        target=5,
                        description="Percentage of PRs not merged within 48 hours",
                        polarity=LOWER,
                        unit=Unit.PERCENT,
                    ),
                    MetricConfig(
                        "mergeSuccessRate",
                        "Merge Success Rate",
                        target=95,
                        description="Percentage of approved PRs successfully merged",
                        unit=Unit.PERCENT,
                    ),
                    MetricConfig(
                        "conflictRate",
                        "Conflict Rate",
                        target=10,
                        description="Percentage of PRs requiring conflict resolution",
                        polarity=LOWER,
                        unit=Unit.PERCENT,
                    ),
                ),
                description="Track and improve pull request merge completion time",
                x_field="tooltipLabel",
            )
        ]
    ),
)

HIGH_RISK_GOALS = Widget(
    key="high-risk-goals",
    title="High Risk PR Goals",
    registry=ViewRegistry(
        [
            ViewConfig(
                ViewType.HIGH_RISK_GOALS,
                "High Risk PR Goals",
                tuple(
                    MetricConfig(k, label, target=target, description=desc, polarity=LOWER, unit=Unit.PERCENT)
                    for k, label, target, desc in [
                        ("highRiskRate", "High Risk PR Rate", 10, "Percentage of PRs classified as high risk"),
                        ("criticalPathChanges", "Critical Path Changes", 5, "Percentage of PRs modifying critical system paths"),
                        ("securityImpact", "Security Impact", 3, "Percentage of PRs with security implications"),
                        ("multiServiceChanges", "Multi-Service Changes", 15, "Percentage of PRs affecting multiple services"),
                    ]
                ),
                description="Track and reduce high risk pull requests",
                x_field="tooltipLabel",
            )
        ]
    ),
)


WIDGETS: Dict[str, Widget] = {
    w.key: w
    for w in [
        PR_METRICS,
        DEPLOYMENTS,
        CYCLE_TIME,
        TEAM_GOALS,
        PR_SIZE_GOALS,
        PR_REVIEW_GOALS,
        PR_REVIEW_TIME_GOALS,
        PR_PICKUP_GOALS,
        PR_MERGE_TIME_GOALS,
        HIGH_RISK_GOALS,
    ]
}


def get_widget(key: str) -> Optional[Widget]:
    return WIDGETS.get((key or "").strip())


def list_widgets() -> List[Widget]:
    return list(WIDGETS.values())

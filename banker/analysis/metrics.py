"""
Metrics for the Banker's Algorithm Resource Manager.

Summarizes decisions from an event log and capacity use from a report.
"""

from dataclasses import dataclass, field
from typing import Dict
import statistics

from banker.analysis.events import EventLog, EventType
from banker.models.system_state import SystemReport


@dataclass
class ManagerMetrics:
    """
    Accumulated metrics for one manager's lifetime.

    Tracks:
    1. Grants and denials, overall and per process
    2. Denials broken down by reason
    3. Resource Utilization %: used / total per kind at report time
    """
    registrations: int = 0
    releases: int = 0
    granted_count: int = 0
    denied_count: int = 0

    process_granted_counts: Dict[str, int] = field(default_factory=dict)
    process_denied_counts: Dict[str, int] = field(default_factory=dict)
    denial_reasons: Dict[str, int] = field(default_factory=dict)
    resource_utilization: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def collect(cls, event_log: EventLog, report: SystemReport) -> "ManagerMetrics":
        """
        Build metrics from an event log and a system report.

        Args:
            event_log: Events recorded by the manager
            report: Current system report (for utilization)

        Returns:
            Populated ManagerMetrics
        """
        metrics = cls()
        for event in event_log.events:
            if event.event_type == EventType.REGISTER:
                metrics.registrations += 1
            elif event.event_type == EventType.RELEASE:
                metrics.releases += 1
            elif event.event_type == EventType.ALLOCATION:
                metrics.record_allocation(event.process_id)
            elif event.event_type == EventType.DENIAL:
                metrics.record_denial(event.process_id, event.reason)
        metrics.record_utilization(report)
        return metrics

    def record_allocation(self, process_id: str) -> None:
        """
        Record a granted request for a process.

        Args:
            process_id: Process identifier
        """
        self.granted_count += 1
        self.process_granted_counts[process_id] = self.process_granted_counts.get(process_id, 0) + 1

    def record_denial(self, process_id: str, reason: str) -> None:
        """
        Record a denied request for a process.

        Args:
            process_id: Process identifier
            reason: DenialReason value
        """
        self.denied_count += 1
        self.process_denied_counts[process_id] = self.process_denied_counts.get(process_id, 0) + 1
        self.denial_reasons[reason] = self.denial_reasons.get(reason, 0) + 1

    def record_utilization(self, report: SystemReport) -> None:
        for kind in report.kinds:
            if kind.total > 0:
                self.resource_utilization[kind.name] = (kind.used / kind.total) * 100
            else:
                self.resource_utilization[kind.name] = 0.0

    def get_grant_rate(self) -> float:
        """Granted requests / all requests (0.0 when nothing was requested)."""
        total = self.granted_count + self.denied_count
        if total == 0:
            return 0.0
        return self.granted_count / total

    def get_avg_utilization(self) -> float:
        """Mean utilization across kinds."""
        if not self.resource_utilization:
            return 0.0
        return statistics.mean(self.resource_utilization.values())

    def display(self) -> str:
        """Format metrics for display."""
        lines = ["\nManager Statistics:"]
        lines.append(f"  Registrations: {self.registrations}")
        lines.append(f"  Releases: {self.releases}")
        lines.append(f"  Granted Requests: {self.granted_count}")
        lines.append(f"  Denied Requests: {self.denied_count}")
        lines.append(f"  Grant Rate: {self.get_grant_rate():.2%}")
        for reason, count in sorted(self.denial_reasons.items()):
            lines.append(f"    {reason}: {count}")
        lines.append("\n  Resource Utilization:")
        for name, util in self.resource_utilization.items():
            lines.append(f"    {name}: {util:.1f}%")
        lines.append(f"    average: {self.get_avg_utilization():.1f}%")
        return "\n".join(lines)

"""XML-structured fix plan for coding agents.

Failures are grouped by the namespace of each missing reference so that
every group can be handed to a separate agent without overlapping edits.
"""
from typing import Dict, List, Sequence
from xml.sax.saxutils import escape, quoteattr

from refcheck.results import AnalysisResult

from .base import Reporter

MAX_AGENTS = 4


class AgentReporter(Reporter):
    """Silent during analysis; prints an ``<agent_orchestration>`` prompt at the end."""

    @property
    def tag(self) -> str:
        return 'missing_' + self.noun.replace(' ', '_')

    def finish(self, results: Sequence[AnalysisResult]) -> None:
        failures = [r for r in results if not r.success]
        if not failures:
            self.emit(f"✓ All {self.noun} references exist - no fixes needed.")
            return
        for line in self.render(failures):
            self.emit(line)

    def emit(self, line: str) -> None:
        self.console.print(line, markup=False, highlight=False, soft_wrap=True)

    def group_by_namespace(self, failures: Sequence[AnalysisResult]) -> Dict[str, List[AnalysisResult]]:
        grouped: Dict[str, List[AnalysisResult]] = {}
        for result in failures:
            for name in result.missing:
                group = grouped.setdefault(self.namespace(name), [])
                if result not in group:
                    group.append(result)
        return grouped

    def render(self, failures: Sequence[AnalysisResult]) -> List[str]:
        grouped = self.group_by_namespace(failures)
        lines = [
            "<agent_orchestration>",
            "  <summary>",
            f"    <total_files_with_issues>{len(failures)}</total_files_with_issues>",
            f"    <namespaces_affected>{len(grouped)}</namespaces_affected>",
            f"    <recommended_parallel_agents>{min(len(grouped), MAX_AGENTS)}</recommended_parallel_agents>",
            "  </summary>",
            "",
            "  <parallel_strategy>",
            "    <instruction>Launch all agents simultaneously for maximum efficiency</instruction>",
            "",
        ]
        for number, (namespace, group) in enumerate(grouped.items(), start=1):
            lines.extend(self.render_agent(number, namespace, group))
        lines += [
            "  </parallel_strategy>",
            "",
            "  <sequential_alternative>",
            "    <instruction>If parallel execution unavailable, process in this order</instruction>",
        ]
        for index, result in enumerate(failures, start=1):
            lines.append(f"    <file index=\"{index}\" path={quoteattr(str(result.file))}>")
            if result.has_error():
                lines.append(f"      <error>{escape(result.error)}</error>")
            for name in result.missing:
                lines.append(f"      <{self.tag}>{escape(name)}</{self.tag}>")
            lines.append("    </file>")
        lines += [
            "  </sequential_alternative>",
            "",
            "  <execution_instructions>",
            "    <step>Launch all agents simultaneously using your multi-agent orchestration tool</step>",
            "    <step>Each agent works independently on its assigned namespace</step>",
            "    <step>Monitor for completion and conflicts</step>",
            "    <step>Re-run refcheck to verify all issues resolved</step>",
            "  </execution_instructions>",
            "</agent_orchestration>",
        ]
        return lines

    def render_agent(self, number: int, namespace: str, group: Sequence[AnalysisResult]) -> List[str]:
        relevant = {
            str(result.file): [name for name in result.missing if self.namespace(name) == namespace]
            for result in group
        }
        unique_missing = {name for names in relevant.values() for name in names}

        lines = [
            f"    <agent id=\"{number}\">",
            f"      <namespace>{escape(namespace)}</namespace>",
            f"      <files_affected>{len(relevant)}</files_affected>",
            f"      <{self.tag}_count>{len(unique_missing)}</{self.tag}_count>",
            "",
            "      <task>",
            f"        <objective>Fix missing {self.noun} references in assigned files</objective>",
            "",
            "        <steps>",
        ]
        lines += [f"          <step>{step}</step>" for step in self.steps()]
        lines += [
            "        </steps>",
            "      </task>",
            "",
            "      <files>",
        ]
        for path, names in relevant.items():
            lines.append(f"        <file path={quoteattr(path)}>")
            for name in names:
                lines.append(f"          <{self.tag}>{escape(name)}</{self.tag}>")
            lines.append("        </file>")
        lines += [
            "      </files>",
            "",
            f"      <expected_outcome>All files have valid {self.noun} references</expected_outcome>",
            "    </agent>",
            "",
        ]
        return lines

    def steps(self) -> List[str]:
        if self.noun == 'class':
            return [
                "Determine if each missing class is a typo, missing import, or missing dependency",
                "Add proper use statements if the class exists elsewhere",
                "Install missing packages via composer if needed",
                "Fix typos in class names if applicable",
            ]
        return [
            f"Determine if each missing {self.noun} is a typo or was never defined",
            f"Fix typos in {self.plural} if applicable",
            f"Define the missing {self.plural} where they belong",
        ]

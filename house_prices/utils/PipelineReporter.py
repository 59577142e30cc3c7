import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import mlflow

log = logging.getLogger("PipelineReporter")


class PipelineReporter:
    """
    Collects the per-stage reports of one run and writes them out as
    JSON + Markdown (figures linked from the Markdown).  With MLflow enabled
    the report files and figures are logged to the active run.
    """

    def __init__(
        self,
        report_dir: Union[str, Path] = "reports",
        enable_mlflow: bool = False,
    ):
        self.report_dir = Path(report_dir)
        self.report_dir.mkdir(parents=True, exist_ok=True)
        self.enable_mlflow = enable_mlflow
        self.sections: Dict[str, Dict[str, Any]] = {}

    def register(self, name: str, summary: Dict[str, Any], charts: List[str] = None):
        self.sections[name] = {"summary": summary, "charts": list(charts or [])}

    def generate_report(self, output_name: str = "pipeline_report") -> Dict:
        markdown = ["# House Prices Pipeline Report\n"]
        for name, section in self.sections.items():
            markdown.append(f"## {name}\n")
            if section["summary"]:
                markdown.append(
                    "```json\n" + json.dumps(section["summary"], indent=2, default=str) + "\n```\n")
            for chart in section["charts"]:
                markdown.append(f"![{name}]({chart})\n")

        json_path = self.report_dir / f"{output_name}.json"
        md_path = self.report_dir / f"{output_name}.md"
        with open(json_path, "w") as f:
            json.dump(self.sections, f, indent=2, default=str)
        with open(md_path, "w") as f:
            f.write("\n".join(markdown))
        log.info(f"Pipeline report → {json_path}, {md_path}")

        if self.enable_mlflow:
            mlflow.log_artifact(str(json_path))
            mlflow.log_artifact(str(md_path))
            for section in self.sections.values():
                for chart_path in section["charts"]:
                    mlflow.log_artifact(chart_path, artifact_path="figures")

        return self.sections

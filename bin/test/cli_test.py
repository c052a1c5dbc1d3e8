from __future__ import annotations

import json
import unittest
from pathlib import Path

from bundlesize.cli import cli
from click.testing import CliRunner


def generate_bundle(size_in_bytes: int) -> str:
    block = (
        "function testFunc() {\n"
        '    console.log("Hello, world " + index + "!");\n'
        "    for (let j = 0; j < 10; j++) {\n"
        "        console.log(j);\n"
        "    }\n"
        "}\n"
    )
    repeats = size_in_bytes // len(block) + 1
    content = "".join(block.replace("index", str(i)) for i in range(repeats))
    return content[:size_in_bytes]


class TestCli(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()

    def write(self, path: str, content: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        Path(path).write_text(content, encoding="utf-8")

    def write_config(self, data, path: str = "bundle-size.config.json") -> None:
        self.write(path, json.dumps(data))

    def test_reports_sizes_and_passes(self):
        with self.runner.isolated_filesystem():
            self.write("testEnv/index.js", generate_bundle(102400))
            self.write_config({"components": {"main": {"maxSize": "200 KB", "include": ["testEnv/*.js"]}}})

            result = self.runner.invoke(cli, [])

            self.assertEqual(result.exit_code, 0, result.output)
            self.assertIn("Bundle Size Analyser Report", result.output)
            self.assertIn("Component: main", result.output)
            self.assertIn("Total Size: 100.00 KB", result.output)
            self.assertIn("Gzip Size: ", result.output)
            self.assertIn("Brotli Size: ", result.output)
            self.assertIn("Within max size limit of 200 KB", result.output)
            self.assertIn("No baseline size to compare against.", result.output)
            self.assertIn("All components are within size thresholds.", result.output)
            self.assertEqual(json.loads(Path("bundle-sizes.json").read_text(encoding="utf-8")), {"main": 102400})
            self.assertFalse(Path("bundle-size-failures.json").exists())

    def test_custom_config_path_and_disabled_compression(self):
        with self.runner.isolated_filesystem():
            self.write("dist/button.js", "x" * 2048)
            self.write_config(
                {
                    "compression": {"gzip": False, "brotli": False},
                    "baselineFile": "sizes.json",
                    "components": {"button": {"include": "dist/*.js"}},
                },
                path="config/sizes.config.json",
            )

            result = self.runner.invoke(cli, ["-c", "config/sizes.config.json"])

            self.assertEqual(result.exit_code, 0, result.output)
            self.assertIn("Total Size: 2.00 KB", result.output)
            self.assertNotIn("Gzip Size", result.output)
            self.assertNotIn("Brotli Size", result.output)
            self.assertTrue(Path("sizes.json").exists())

    def test_exceeding_max_size_exits_1(self):
        with self.runner.isolated_filesystem():
            self.write("dist/button.js", "x" * 25600)
            self.write_config({"components": {"button": {"maxSize": "20 KB", "include": "dist/button.js"}}})

            result = self.runner.invoke(cli, ["--config", "bundle-size.config.json"])

            self.assertEqual(result.exit_code, 1)
            self.assertIn("Exceeded max size of 20 KB by 5.00 KB", result.output)
            self.assertIn("One or more components exceeded size thresholds.", result.output)
            self.assertEqual(
                json.loads(Path("bundle-size-failures.json").read_text(encoding="utf-8")),
                [{"component": "button", "expectedThreshold": "20 KB", "actualSizeKB": 25.0}],
            )
            self.assertEqual(json.loads(Path("bundle-sizes.json").read_text(encoding="utf-8")), {"button": 25600})

    def test_growth_over_threshold_exits_1(self):
        with self.runner.isolated_filesystem():
            self.write("dist/button.js", "x" * 1100)
            self.write("bundle-sizes.json", json.dumps({"button": 1000}))
            self.write_config({"components": {"button": {"warnOnIncrease": "5%", "include": "dist/button.js"}}})

            result = self.runner.invoke(cli, ["--failure-report", "reports/failures.json"])

            self.assertEqual(result.exit_code, 1)
            self.assertIn(
                "Size increased by 10.00% since last recorded size, exceeding threshold of 5%", result.output
            )
            self.assertEqual(json.loads(Path("reports/failures.json").read_text(encoding="utf-8")), [])

    def test_no_update_baseline(self):
        with self.runner.isolated_filesystem():
            self.write("dist/button.js", "x" * 100)
            self.write_config({"components": {"button": {"include": "dist/button.js"}}})

            result = self.runner.invoke(cli, ["--no-update-baseline"])

            self.assertEqual(result.exit_code, 0, result.output)
            self.assertFalse(Path("bundle-sizes.json").exists())

    def test_missing_dist_folder_is_fatal(self):
        with self.runner.isolated_filesystem():
            self.write("dist/button.js", "x" * 100)
            self.write_config(
                {
                    "components": {
                        "button": {"include": "dist/button.js"},
                        "card": {"distFolderLocation": "packages/card/dist"},
                    }
                }
            )

            result = self.runner.invoke(cli, [])

            self.assertEqual(result.exit_code, 1)
            self.assertIn("Error: Distribution folder for component 'card' does not exist", result.output)
            self.assertIn("packages/card/dist", result.output)
            self.assertNotIn("Bundle Size Analyser Report", result.output)
            self.assertFalse(Path("bundle-sizes.json").exists())

    def test_missing_config_is_fatal(self):
        with self.runner.isolated_filesystem():
            result = self.runner.invoke(cli, [])

            self.assertEqual(result.exit_code, 1)
            self.assertIn("Error: Unable to read configuration bundle-size.config.json", result.output)

    def test_dist_folder_variants(self):
        with self.runner.isolated_filesystem():
            self.write("packages/card/dist/index.js", "x" * 1024)
            self.write("packages/card/dist/react.js", "x" * 1024)
            self.write("packages/card/dist/chunk.js", "x" * 1024)
            self.write_config(
                {
                    "compression": {"gzip": False, "brotli": False},
                    "components": {"card": {"maxSize": "5KB", "distFolderLocation": "packages/card/dist"}},
                }
            )

            result = self.runner.invoke(cli, [])

            self.assertEqual(result.exit_code, 0, result.output)
            self.assertIn("Component: card\n", result.output)
            self.assertIn("Component: card/entry+companion\n", result.output)
            self.assertIn("Component: card/entry+companion+other\n", result.output)
            self.assertEqual(
                json.loads(Path("bundle-sizes.json").read_text(encoding="utf-8")),
                {"card": 1024, "card/entry+companion": 2048, "card/entry+companion+other": 3072},
            )


if __name__ == "__main__":
    unittest.main()

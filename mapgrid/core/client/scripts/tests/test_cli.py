# Copyright 2024 The Mapgrid Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import json
import unittest
from unittest import mock

import click.testing

from ....store import MemoryStore
from ...version import __version__
from ..cli import cli

STORE = MemoryStore(
    {
        "tblParcels": [
            {
                "id": "r1",
                "fields": {"kind": "farm", "area": 2, "geometry": "POINT(1 2)"},
            },
            {
                "id": "r2",
                "fields": {"kind": "wood", "area": 8, "geometry": "POINT(3 4)"},
            },
            {"id": "r3", "fields": {"kind": "farm", "area": 5, "geometry": "bad"}},
        ]
    }
)


class TestCli(unittest.TestCase):
    def setUp(self):
        self.runner = click.testing.CliRunner()

    def test_version(self):
        result = self.runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert result.output == f"{__version__}\n"

    def test_env(self):
        result = self.runner.invoke(cli, ["env"])
        assert result.exit_code == 0
        assert result.output == "testing\n"

    def test_wkt(self):
        result = self.runner.invoke(cli, ["wkt", "POINT (4.5 52.1)"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "type": "Point",
            "coordinates": [4.5, 52.1],
        }

    def test_wkt_measures(self):
        result = self.runner.invoke(cli, ["wkt", "LINESTRING(0 0, 0 0.001)"])
        assert result.exit_code == 0
        assert result.output.splitlines()[-1] == "Length: 111 m"

    def test_wkt_invalid(self):
        result = self.runner.invoke(cli, ["wkt", "garbage"])
        assert result.exit_code == 1
        assert "Not a valid geometry" in result.output


@mock.patch("mapgrid.core.client.scripts.cli.TableClient.get_default_client")
class TestLayerCommand(unittest.TestCase):
    def setUp(self):
        self.runner = click.testing.CliRunner()

    def test_summary(self, get_default_client):
        get_default_client.return_value = STORE
        result = self.runner.invoke(cli, ["layer", "tblParcels"])

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0] == "Records: 3"
        assert lines[1] == "Features: 2"
        assert lines[2] == "Bounds: 1.000000 2.000000 3.000000 4.000000"

    def test_filter(self, get_default_client):
        get_default_client.return_value = STORE
        result = self.runner.invoke(
            cli, ["layer", "tblParcels", "--filter", "kind:equals:wood"]
        )

        assert result.exit_code == 0, result.output
        assert "Visible: 1" in result.output

    def test_bad_filter(self, get_default_client):
        get_default_client.return_value = STORE
        result = self.runner.invoke(
            cli, ["layer", "tblParcels", "--filter", "kind:near:wood"]
        )
        assert result.exit_code == 2

    def test_classify(self, get_default_client):
        get_default_client.return_value = STORE
        result = self.runner.invoke(
            cli,
            [
                "layer",
                "tblParcels",
                "--field",
                "area",
                "--classes",
                "2",
                "--ramp",
                "reds",
            ],
        )

        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[-2:] == [
            "#fff5f0  2.00 - 5.00",
            "#67000d  5.00 - 8.00",
        ]

    def test_categorized(self, get_default_client):
        get_default_client.return_value = STORE
        result = self.runner.invoke(
            cli, ["layer", "tblParcels", "--field", "kind", "--mode", "categorized"]
        )

        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[-2].endswith("  farm")
        assert result.output.splitlines()[-1].endswith("  wood")

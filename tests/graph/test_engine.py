"""End-to-end tests for ComponentEnvGraph with the Tree-sitter parser."""

import os
import posixpath

import pytest

from component_env_graph import ComponentEnvGraph
from component_env_graph.exceptions import ConfigurationError
from component_env_graph.models import ComponentType

TSCONFIG = '{ "compilerOptions": { "jsx": "react" }, "include": ["**/*"] }'


TYPE_CASES = [
    pytest.param(
        {"client.tsx": '"use client"; export const C = () => null;'},
        {"client.tsx": "client"},
        id="client-directive",
    ),
    pytest.param(
        {
            "Parent.tsx": '"use client"; import { A } from "./a"; export const P = () => null;',
            "a.tsx": "export const A = () => null;",
            "a.stories.tsx": 'import { A } from "./a"; export default {};',
        },
        {"Parent.tsx": "client", "a.tsx": "client", "a.stories.tsx": None},
        id="stories-file-does-not-affect-graph",
    ),
    pytest.param(
        {
            "a.tsx": '"use client"; import { B } from "./b"; export const A = () => null;',
            "c.tsx": 'import { B } from "./b"; export const C = () => null;',
            "b.tsx": "export const B = () => null;",
        },
        {"a.tsx": "client", "b.tsx": "universal", "c.tsx": "server"},
        id="shared-dependency-of-client-and-server",
    ),
    pytest.param(
        {"server.tsx": "export const S = () => null;"},
        {"server.tsx": "server"},
        id="server-component",
    ),
    pytest.param(
        {
            "client.tsx": '"use client"; import { Sh } from "./universal"; export const C = () => null;',
            "server.tsx": 'import { Sh } from "./universal"; export const S = () => null;',
            "universal.tsx": "export const Sh = () => null;",
        },
        {"universal.tsx": "universal"},
        id="universal-component",
    ),
    pytest.param(
        {
            "a.tsx": '"use client"; import { B } from "./b"; export const A = () => null;',
            "b.tsx": 'import { C } from "./c"; export const B = () => null;',
            "c.tsx": "export const C = () => null;",
        },
        {"a.tsx": "client", "b.tsx": "client", "c.tsx": "client"},
        id="client-chain",
    ),
    pytest.param(
        {
            "foo.config.ts": "export const x = 1;",
            "foo.d.ts": "export type X = number;",
            "foo.test.ts": "export const t = 1;",
            "foo.spec.ts": "export const s = 1;",
            "__mocks__/bar.ts": "export const m = 1;",
        },
        {
            "foo.config.ts": None,
            "foo.d.ts": None,
            "foo.test.ts": None,
            "foo.spec.ts": None,
            "__mocks__/bar.ts": None,
        },
        id="default-exclusions",
    ),
    pytest.param(
        {
            "a.tsx": 'import { B } from "./b"; export const A = () => null;',
            "b.tsx": 'import { A } from "./a"; export const B = () => null;',
        },
        {"a.tsx": "server", "b.tsx": "server"},
        id="circular-imports",
    ),
    pytest.param(
        {
            "Upper.tsx": "export const U = 1;",
            "importer.tsx": 'import { U } from "./Upper"; export const I = 1;',
        },
        {"Upper.tsx": "server", "importer.tsx": "server"},
        id="extensionless-import",
    ),
    pytest.param(
        {
            "index.ts": '"use client"; export * from "./Button";',
            "Button.tsx": "export const Button = () => null;",
        },
        {"index.ts": "client", "Button.tsx": "client"},
        id="re-export-from-client-index",
    ),
]


def specifier_to_a(excluded_path: str) -> str:
    """Relative specifier from an excluded file to a.tsx at the root."""
    relative = posixpath.relpath("a", posixpath.dirname(excluded_path) or ".")
    return relative if relative.startswith(".") else f"./{relative}"


class TestFullBuild:
    """Tests for classification after a full scan."""

    @pytest.mark.parametrize("files,expected", TYPE_CASES)
    def test_types(self, project, files, expected):
        project.write_all(files)
        graph = ComponentEnvGraph(project.root_dir)

        graph.build()

        for relative, expected_type in expected.items():
            node = graph.nodes.get(project.path(relative))
            if expected_type is None:
                assert node is None, f"{relative} should not be a node"
            else:
                assert node is not None, f"{relative} should be a node"
                assert node.type == expected_type

    def test_imports_are_absolute_paths(self, project):
        project.write_all(
            {
                "a.tsx": 'import { B } from "./b"; import React from "react"; export const A = 1;',
                "b.tsx": "export const B = 1;",
            }
        )
        graph = ComponentEnvGraph(project.root_dir)

        graph.build()

        assert graph.nodes[project.path("a.tsx")].imports == (project.path("b.tsx"),)

    def test_path_alias_import(self, project):
        project.write(
            "tsconfig.json",
            '{ "compilerOptions": { "baseUrl": ".", "paths": { "@/*": ["src/*"] } } }',
        )
        project.write_all(
            {
                "app/page.tsx": 'import { Button } from "@/components/button"; export default 1;',
                "app/form.tsx": '"use client"; import { Button } from "@/components/button"; export const F = 1;',
                "src/components/button.tsx": "export const Button = () => null;",
            }
        )
        graph = ComponentEnvGraph(project.root_dir)

        graph.build()

        assert graph.get_component_type(project.path("src/components/button.tsx")) == ComponentType.UNIVERSAL
        assert graph.get_component_type(project.path("app/page.tsx")) == ComponentType.SERVER

    def test_syntax_error_leaves_file_out(self, project):
        project.write_all(
            {
                "broken.tsx": "export const = ;",
                "ok.tsx": "export const Ok = 1;",
            }
        )
        graph = ComponentEnvGraph(project.root_dir)

        graph.build()

        assert project.path("broken.tsx") not in graph.nodes
        assert graph.get_component_type(project.path("ok.tsx")) == ComponentType.SERVER

    def test_js_files_ignored_without_allow_js(self, project):
        project.write("legacy.js", "export const L = 1;")
        graph = ComponentEnvGraph(project.root_dir)

        graph.build()

        assert project.path("legacy.js") not in graph.nodes

    def test_js_files_included_with_allow_js(self, project):
        project.write("tsconfig.json", '{ "compilerOptions": { "allowJs": true } }')
        project.write_all(
            {
                "entry.tsx": '"use client"; import { L } from "./legacy"; export const E = 1;',
                "legacy.js": "export const L = 1;",
            }
        )
        graph = ComponentEnvGraph(project.root_dir)

        graph.build()

        assert graph.get_component_type(project.path("legacy.js")) == ComponentType.CLIENT

    def test_repeated_full_builds_are_idempotent(self, project):
        project.write_all(
            {
                "a.tsx": '"use client"; import { B } from "./b"; export const A = 1;',
                "b.tsx": "export const B = 1;",
                "c.tsx": 'import { B } from "./b"; export const C = 1;',
            }
        )
        graph = ComponentEnvGraph(project.root_dir)

        graph.build()
        first = dict(graph.nodes)
        graph.build()

        assert dict(graph.nodes) == first

    def test_full_build_picks_up_deleted_files(self, project):
        project.write("gone.tsx", "export const G = 1;")
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()

        project.remove("gone.tsx")
        graph.build()

        assert project.path("gone.tsx") not in graph.nodes


class TestIncrementalBuild:
    """Tests for builds driven by changed file lists."""

    def test_directive_added_then_removed(self, project):
        server = project.write("server.tsx", "export const S = () => null;")
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()

        project.write("server.tsx", '"use client"; export const S = () => null;')
        graph.build([server])
        assert graph.get_component_type(server) == ComponentType.CLIENT

        project.write("server.tsx", "export const S = () => null;")
        graph.build([server])
        assert graph.get_component_type(server) == ComponentType.SERVER

    def test_deleted_file_is_removed(self, project):
        shared = project.write("shared.tsx", "export const Sh = () => null;")
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()
        assert shared in graph.nodes

        project.remove("shared.tsx")
        graph.build([shared])

        assert shared not in graph.nodes

    def test_unchanged_importer_is_reclassified(self, project):
        project.write_all(
            {
                "a.tsx": 'import { B } from "./b"; export const A = 1;',
                "b.tsx": "export const B = 1;",
            }
        )
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()
        assert graph.get_component_type(project.path("b.tsx")) == ComponentType.SERVER

        a = project.write("a.tsx", '"use client"; import { B } from "./b"; export const A = 1;')
        graph.build([a])

        assert graph.get_component_type(project.path("b.tsx")) == ComponentType.CLIENT

    def test_tsx_added_after_init(self, project):
        """An importer written before its target picks the target up."""
        project.write("Parent.tsx", '"use client"; import { A } from "./a"; export const P = () => null;')
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()
        assert graph.nodes[project.path("Parent.tsx")].imports == ()

        a = project.write("a.tsx", "export const A = () => null;\n")
        graph.build([a])

        assert graph.get_component_type(project.path("Parent.tsx")) == ComponentType.CLIENT
        assert graph.get_component_type(a) == ComponentType.CLIENT
        assert graph.nodes[project.path("Parent.tsx")].imports == (a,)

    @pytest.mark.parametrize(
        "relative",
        ["node_modules/pkg/index.ts", ".git/hooks/a.ts", "dist/a.ts"],
    )
    def test_default_exclusions_ignored(self, project, relative):
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()

        target = project.write(relative, "export const X = 1;\n")
        graph.build([target])

        assert target not in graph.nodes

    @pytest.mark.parametrize(
        "relative,pattern",
        [("vendor/lib/a.ts", "vendor/**"), ("scripts/setup/a.ts", "scripts/**/*.ts")],
    )
    def test_custom_exclusions_ignored(self, project, relative, pattern):
        graph = ComponentEnvGraph(project.root_dir, exclude=[pattern])
        graph.build()

        target = project.write(relative, "export const X = 1;\n")
        graph.build([target])

        assert target not in graph.nodes

    def test_out_of_scope_path_is_ignored(self, project):
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()

        target = project.write("styles.css", "body {}")
        graph.build([target])

        assert target not in graph.nodes

    def test_excluded_target_of_later_importer(self, project):
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()

        stories = project.write("a.stories.tsx", "export const Story = 1;")
        graph.build([stories])
        parent = project.write(
            "Parent.tsx", '"use client"; import { Story } from "./a.stories"; export const P = 1;'
        )
        graph.build([parent])

        assert stories not in graph.nodes
        assert graph.nodes[parent].imports == (stories,)
        assert graph.get_component_type(parent) == ComponentType.CLIENT

    def test_asset_imports_do_not_trigger_reparse(self, project, mocker):
        """Importers of stylesheets and images are not re-parsed when unrelated files appear."""
        page = project.write(
            "page.tsx",
            'import styles from "./page.module.css"; import logo from "./logo.svg"; export default 1;',
        )
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()
        parse = mocker.spy(graph.parser, "parse")

        other = project.write("other.tsx", "export const O = 1;")
        graph.build([other])

        assert [c.args[0] for c in parse.call_args_list] == [other]
        assert page in graph.nodes

    def test_suffix_exclusions_apply_outside_root(self, project, tmp_path):
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()

        outside = tmp_path / "elsewhere" / "x.stories.tsx"
        outside.parent.mkdir()
        outside.write_text("export default {};")
        graph.build([str(outside)])

        assert str(outside) not in graph.nodes


EXCLUDED_IMPORTERS = [
    "a.stories.tsx",
    "a.stories.ts",
    "foo.test.tsx",
    "foo.spec.ts",
    "__mocks__/mock.ts",
    "foo.config.ts",
]


class TestExcludedImporters:
    """Excluded files never influence classification."""

    @pytest.fixture
    def parent_project(self, project):
        project.write_all(
            {
                "Parent.tsx": '"use client"; import { A } from "./a"; export const P = () => null;',
                "a.tsx": "export const A = () => null;",
            }
        )
        return project

    @pytest.mark.parametrize("excluded_path", EXCLUDED_IMPORTERS)
    def test_present_before_graph_creation(self, parent_project, excluded_path):
        parent_project.write(
            excluded_path, f'import {{ A }} from "{specifier_to_a(excluded_path)}"; export default {{}};\n'
        )
        graph = ComponentEnvGraph(parent_project.root_dir)

        graph.build()

        assert graph.get_component_type(parent_project.path("Parent.tsx")) == ComponentType.CLIENT
        assert graph.get_component_type(parent_project.path("a.tsx")) == ComponentType.CLIENT
        assert parent_project.path(excluded_path) not in graph.nodes

    @pytest.mark.parametrize("excluded_path", EXCLUDED_IMPORTERS)
    def test_added_incrementally(self, parent_project, excluded_path):
        graph = ComponentEnvGraph(parent_project.root_dir)
        graph.build()

        excluded = parent_project.write(
            excluded_path, f'import {{ A }} from "{specifier_to_a(excluded_path)}"; export default {{}};\n'
        )
        graph.build([excluded])

        assert excluded not in graph.nodes
        assert graph.get_component_type(parent_project.path("a.tsx")) == ComponentType.CLIENT


class TestConfiguration:
    """Tests for construction options."""

    def test_custom_tsconfig_path(self, tmp_path):
        custom = tmp_path / "custom-tsconfig.json"
        custom.write_text(TSCONFIG)
        (tmp_path / "client.tsx").write_text('"use client"; export const C = () => null;')

        graph = ComponentEnvGraph(str(tmp_path), tsconfig_file_path=str(custom))
        graph.build()

        assert graph.get_component_type(str(tmp_path / "client.tsx")) == ComponentType.CLIENT
        assert graph.tsconfig.config_path == str(custom)

    def test_default_tsconfig_path(self, project):
        project.write("client.tsx", '"use client"; export const C = () => null;')

        graph = ComponentEnvGraph(project.root_dir)
        graph.build()

        assert graph.get_component_type(project.path("client.tsx")) == ComponentType.CLIENT
        assert graph.tsconfig.config_path == project.path("tsconfig.json")

    def test_tsconfig_with_shared_base(self, project):
        project.write("tsconfig.base.json", '{ "compilerOptions": { "paths": { "@/*": ["./src/*"] } } }')
        project.write("tsconfig.app.json", '{ "extends": "./tsconfig.base.json" }')
        project.write("tsconfig.lint.json", '{ "extends": "./tsconfig.base.json" }')
        project.write("tsconfig.json", '{ "extends": ["./tsconfig.app.json", "./tsconfig.lint.json"] }')
        page = project.write("page.tsx", 'import { C } from "@/client"; export default 1;')
        client = project.write("src/client.tsx", '"use client"; export const C = () => null;')

        graph = ComponentEnvGraph(project.root_dir)
        graph.build()

        assert graph.nodes[page].imports == (client,)
        assert graph.get_component_type(client) == ComponentType.CLIENT

    def test_missing_tsconfig_raises(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ComponentEnvGraph(str(tmp_path))

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ComponentEnvGraph(str(tmp_path / "nope"))

    def test_relative_root_is_made_absolute(self, project, monkeypatch):
        project.write("a.tsx", "export const A = 1;")
        monkeypatch.chdir(project.root_dir)

        graph = ComponentEnvGraph(".")
        graph.build()

        assert graph.root_dir == os.path.abspath(project.root_dir)
        assert project.path("a.tsx") in graph.nodes

    def test_nodes_empty_before_first_build(self, project):
        project.write("a.tsx", "export const A = 1;")

        graph = ComponentEnvGraph(project.root_dir)

        assert len(graph.nodes) == 0

    def test_statistics(self, project):
        project.write_all(
            {
                "a.tsx": '"use client"; import { B } from "./b"; export const A = 1;',
                "b.tsx": "export const B = 1;",
            }
        )
        graph = ComponentEnvGraph(project.root_dir)
        graph.build()

        stats = graph.get_statistics()

        assert stats["total_nodes"] == 2
        assert stats["tracked_sources"] == 2
        assert stats["by_type"] == {"client": 2, "server": 0, "universal": 0}
        assert stats["builds"] == 1

    def test_is_tracked(self, project):
        graph = ComponentEnvGraph(project.root_dir)

        assert graph.is_tracked(project.path("src/a.tsx"))
        assert not graph.is_tracked(project.path("src/a.stories.tsx"))
        assert not graph.is_tracked(project.path("README.md"))

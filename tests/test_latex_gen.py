import unittest

from tikz_plotter import (
    Category,
    FunctionSpec,
    SettingDescriptor,
    SettingsStore,
    SettingType,
    TikzGenerator,
    render_functions,
    tidy_tikz_source,
)

DEFAULT_DOCUMENT = "\n".join([
    "\\usepackage{pgfplots}",
    "\\pgfplotsset{compat=1.16}",
    "\\begin{document}",
    "\\begin{tikzpicture}",
    "\\begin{axis}[",
    "title={My graph: \\(\\sum\\)},",
    "width={10cm},",
    "height={10cm},",
    "xlabel={x},",
    "ylabel={y},",
    "xmin=-0.5,",
    "xmax=10,",
    "ymin=-0.5,",
    "ymax=5,",
    "]",
    "\\end{axis}\\end{tikzpicture}\\end{document}",
])


def _generator(*functions, **values):
    store = SettingsStore()
    store.update(values)
    store.set_functions(functions)
    return TikzGenerator(store)


def _assert_in_order(test, text, pieces):
    position = -1
    for piece in pieces:
        found = text.find(piece, position + 1)
        test.assertGreater(found, position, f"{piece!r} missing or out of order")
        position = found


class DocumentTests(unittest.TestCase):
    def test_default_document(self):
        self.assertEqual(_generator().render(), DEFAULT_DOCUMENT)

    def test_end_to_end(self):
        generator = _generator(
            FunctionSpec("x", domain="-1:1", color="red", thickness="thin", show_legend=True),
            title="T",
            documentSetup=True,
            documentClose=True,
        )
        for text in (generator.generate(), generator.render()):
            _assert_in_order(self, text, [
                "\\usepackage{pgfplots}",
                "\\begin{axis}[",
                "title={T},",
                "\\addplot[domain=-1:1, red, thin, samples=300] {x};",
                "\\addlegendentry{\\(x\\)}",
                "\\end{axis}\\end{tikzpicture}\\end{document}",
            ])

    def test_idempotent(self):
        generator = _generator(
            FunctionSpec("x^2", domain="-5:5", extrema=True, tangent=True, tangent_point="1"),
            showSmallGrid=True,
        )
        self.assertEqual(generator.generate(), generator.generate())
        self.assertEqual(generator.render(), generator.render())

    def test_reads_store_at_call_time(self):
        generator = _generator()
        before = generator.generate()
        generator.store.set_value("title", "Changed")
        after = generator.generate()
        self.assertNotEqual(before, after)
        self.assertIn("title={Changed},", after)

    def test_bookends_disabled(self):
        text = _generator(documentSetup=False, documentClose=False).generate()
        self.assertNotIn("\\usepackage", text)
        self.assertNotIn("\\begin{document}", text)
        self.assertNotIn("\\end{document}", text)
        self.assertTrue(text.startswith("\n  title="))

    def test_small_grid_gates_grid_size(self):
        hidden = _generator(showSmallGrid=False, gridSize=8).generate()
        self.assertNotIn("minor tick num=", hidden)
        shown = _generator(showSmallGrid=True, gridSize=8).render()
        _assert_in_order(self, shown, ["grid=both,", "minor tick num=8,", "xmin="])

    def test_axis_label_toggle_gates_labels(self):
        text = _generator(show_axis_label=False).generate()
        self.assertNotIn("xlabel", text)
        self.assertNotIn("ylabel", text)

    def test_axis_ranges_emitted_independently(self):
        text = _generator(xmin="-3", xmax="7", ymin="-1", ymax="2").render()
        _assert_in_order(self, text, ["xmin=-3,", "xmax=7,", "ymin=-1,", "ymax=2,", "]"])

    def test_middle_axis_lines(self):
        text = _generator(axis_allaround=False).render()
        _assert_in_order(self, text, ["ymax=5,", "axis lines = middle,", "]"])

    def test_options_close_before_plots(self):
        text = _generator(FunctionSpec("x")).render()
        _assert_in_order(self, text, ["ymax=5,\n]", "\\addplot["])


class FunctionMarkupTests(unittest.TestCase):
    def test_legend_order(self):
        text = _generator(
            FunctionSpec("x^2", show_legend=True),
            FunctionSpec("2*x", show_legend=True),
        ).generate()
        _assert_in_order(self, text, ["\\addlegendentry{\\(x^2\\)}", "\\addlegendentry{\\(2*x\\)}"])

    def test_functions_joined_by_newline(self):
        text = render_functions([FunctionSpec("x"), FunctionSpec("2*x")])
        self.assertEqual(text, (
            "\n\\addplot[domain=-10:10, black, thin, samples=300] {x};\n"
            "\n\\addplot[domain=-10:10, black, thin, samples=300] {2*x};"
        ))

    def test_style_clause(self):
        text = render_functions([FunctionSpec("x", dashed=True, fill=True, color="teal",
                                              thickness="very thick")])
        self.assertIn(
            "\\addplot[domain=-10:10, dashed, fill=teal!20, fill opacity=0.3, teal, very thick,"
            " samples=300] {x};",
            text,
        )

    def test_tangent_annotation(self):
        text = render_functions([FunctionSpec("x^2", domain="-5:5", color="blue",
                                              tangent=True, tangent_point="2")])
        self.assertRegex(text, r"\\addplot\[blue, dashed, domain=-5:5\] \{4\.000\d*\*x \+ -4\.000\d*\};")
        self.assertIn("\\addplot[blue, only marks] coordinates {(2,4)};", text)

    def test_extrema_annotation(self):
        text = render_functions([FunctionSpec("x^2", domain="-5:5", extrema=True)])
        self.assertIn("\\addplot[black, only marks, mark=*, mark size=4pt] coordinates {(0,0)};", text)
        self.assertIn("\\node[below] at (axis cs:0,-1) {minimum};", text)

    def test_extrema_labels_per_point(self):
        text = render_functions([FunctionSpec("x^3 - 3*x", domain="-3:3", extrema=True)])
        _assert_in_order(self, text, ["mark size=4pt] coordinates {(", "\\node[above]", "{maximum};",
                                      "\\node[below]", "{minimum};"])

    def test_no_extrema_no_markup(self):
        text = render_functions([FunctionSpec("2*x", extrema=True)])
        self.assertNotIn("only marks", text)
        self.assertNotIn("\\node", text)

    def test_invalid_tangent_point_is_isolated(self):
        with self.assertLogs("tikz_plotter.functions", level="WARNING"):
            text = _generator(
                FunctionSpec("x", color="red", tangent=True, tangent_point="20", show_legend=True),
                FunctionSpec("x^2", domain="-5:5", color="blue", tangent=True, tangent_point="2"),
            ).generate()
        self.assertIn("\\addplot[domain=-10:10, red, thin, samples=300] {x};", text)
        self.assertIn("\\addlegendentry{\\(x\\)}", text)
        self.assertNotIn("\\addplot[red, dashed", text)
        self.assertNotIn("\\addplot[red, only marks]", text)
        self.assertIn("\\addplot[blue, dashed, domain=-5:5]", text)
        self.assertIn("\\addplot[blue, only marks] coordinates {(2,4)};", text)

    def test_tangent_evaluation_error_is_isolated(self):
        text = render_functions([FunctionSpec("log(x)", domain="0:5", tangent=True,
                                              tangent_point="0", extrema=False)])
        self.assertIn("{log(x)};", text)
        self.assertNotIn("dashed", text)

    def test_extrema_failure_keeps_base_plot(self):
        text = render_functions([FunctionSpec("log(x)", domain="-1:1", extrema=True, show_legend=True)])
        self.assertIn("\\addplot[domain=-1:1, black, thin, samples=300] {log(x)};", text)
        self.assertIn("\\addlegendentry{\\(log(x)\\)}", text)
        self.assertNotIn("mark size", text)

    def test_invalid_expression_drops_only_that_function(self):
        with self.assertLogs("tikz_plotter.functions", level="WARNING"):
            text = _generator(FunctionSpec("2x +"), FunctionSpec("x^2", show_legend=True)).generate()
        self.assertNotIn("2x +", text)
        self.assertIn("{x^2};", text)
        self.assertIn("\\end{document}", text)

    def test_deeply_nested_expression_drops_only_that_function(self):
        with self.assertLogs("tikz_plotter.functions", level="WARNING"):
            text = _generator(FunctionSpec("-" * 2000 + "x"), FunctionSpec("x^2", show_legend=True),
                              title="Kept").render()
        self.assertIn("title={Kept},", text)
        self.assertIn("{x^2};", text)
        self.assertIn("\\addlegendentry{\\(x^2\\)}", text)
        self.assertTrue(text.endswith("\\end{document}"))

    def test_numeric_tangent_point_from_mapping(self):
        text = render_functions([{"expression": "x^2", "domain": "-5:5", "tangent": True,
                                  "tangentPoint": 0}])
        self.assertIn("\\addplot[black, only marks] coordinates {(0,0)};", text)

    def test_invalid_domain_drops_only_that_function(self):
        text = render_functions([FunctionSpec("x", domain="5:-5"), FunctionSpec("x^3")])
        self.assertNotIn("domain=5:-5", text)
        self.assertIn("{x^3};", text)

    def test_malformed_entries_are_skipped(self):
        text = render_functions([{"expression": "x", "color": "magenta"}, 42, {"expression": "x^2"}])
        self.assertEqual(text, "\n\\addplot[domain=-10:10, black, thin, samples=300] {x^2};")


class SettingFailureTests(unittest.TestCase):
    def test_failing_renderer_is_skipped(self):
        def broken(value):
            raise TypeError("bad value")

        registry = [
            SettingDescriptor("first", "First", "", Category.OTHER, SettingType.TEXT, "a",
                              lambda v: f"<{v}>"),
            SettingDescriptor("broken", "Broken", "", Category.OTHER, SettingType.TEXT, "b", broken),
            SettingDescriptor("last", "Last", "", Category.OTHER, SettingType.TEXT, "c",
                              lambda v: f"[{v}]"),
        ]
        with self.assertLogs("tikz_plotter.latex_gen", level="WARNING"):
            text = TikzGenerator(SettingsStore(registry)).generate()
        self.assertEqual(text, "<a>[c]")


class TidyTests(unittest.TestCase):
    def test_tidy(self):
        self.assertEqual(tidy_tikz_source("  a&nbsp;\n\n   \n&nbsp;\n b  "), "a\nb")

    def test_render_has_no_blank_or_padded_lines(self):
        text = _generator(FunctionSpec("x^2", domain="-5:5", extrema=True),
                          title="&nbsp;Plot").render()
        self.assertNotIn("&nbsp;", text)
        for line in text.split("\n"):
            self.assertTrue(line)
            self.assertEqual(line, line.strip())

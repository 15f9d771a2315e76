"""
Example charts composed with the algebra only.

    - grouped bar chart: data * mark * encoding
    - population pyramid: shared base * row of three views * layout
"""
from vizcompose.composition import hconcat
from vizcompose.model import (
    CommonProperties,
    DataSpec,
    Document,
    EncodingSpec,
    LayoutProperties,
    MarkSpec,
    SingleView,
    TopLevelProperties,
)

POPULATION_URL = "https://vega.github.io/vega-datasets/data/population.json"


def build_grouped_bar(values=None) -> Document:
    if values is None:
        heights = iter([0.1, 0.6, 0.9, 0.7, 0.2, 1.1, 0.6, 0.1, 0.2])
        values = [
            {"category": category, "group": group, "value": next(heights)}
            for category in "ABC"
            for group in "xyz"
        ]
    return (
        DataSpec({"values": values})
        * MarkSpec({"type": "bar", "tooltip": True})
        * EncodingSpec({
            "x": {"field": "category", "type": "nominal"},
            "y": {"field": "value", "type": "quantitative"},
            "xOffset": {"field": "group"},
            "color": {"field": "group"},
        })
    )


def build_population_pyramid(year: int = 2000) -> Document:
    base = (
        DataSpec({"url": POPULATION_URL})
        * CommonProperties(transform=[
            {"filter": f"datum.year == {year}"},
            {"calculate": "datum.sex == 2 ? 'Female' : 'Male'", "as": "gender"},
        ])
        * TopLevelProperties(config={"view": {"stroke": None}, "axis": {"grid": False}})
    )

    def side(gender: str, sort_x: bool, colors: bool) -> SingleView:
        x = {
            "aggregate": "sum",
            "field": "people",
            "title": "population",
            "axis": {"format": "s"},
        }
        if sort_x:
            x["sort"] = "descending"
        color = {"field": "gender", "legend": None}
        if colors:
            color["scale"] = {"range": ["#675193", "#ca8861"]}
        return SingleView.create(
            title=gender,
            transform=[{"filter": {"field": "gender", "equal": gender}}],
            mark="bar",
            encoding={
                "x": x,
                "y": {"field": "age", "axis": None, "sort": "descending"},
                "color": color,
            },
        )

    middle = SingleView.create(
        mark={"type": "text", "align": "center"},
        encoding={
            "y": {"field": "age", "type": "ordinal", "axis": None, "sort": "descending"},
            "text": {"field": "age", "type": "quantitative"},
        },
    )

    return (
        base
        * hconcat(side("Female", True, True), middle, side("Male", False, False))
        * LayoutProperties(spacing=0)
    )

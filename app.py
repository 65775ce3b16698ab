"""
Web dashboard for Neuroevolution Racer training runs

Runs a headless training session and charts per-generation telemetry.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging

import dash
from dash import dcc, html, Input, Output, State
from dash.exceptions import PreventUpdate
import plotly.express as px
import plotly.graph_objs as go

from racer import EngineParams, RacerError, run_training
from racer.analysis import GenerationRecord

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

# Initialize Dash app
app = dash.Dash(__name__)
app.title = "Neuroevolution Racer Training"

app.layout = html.Div([
    html.Div([
        html.H1("Neuroevolution Racer Training",
                style={'textAlign': 'center', 'marginBottom': '30px'}),

        html.Div([
            html.Div([
                html.Label("Generations:",
                          style={'fontWeight': 'bold', 'marginBottom': '5px'}),
                dcc.Input(
                    id='generations-input',
                    type='number',
                    value=10,
                    min=1,
                    max=200,
                    step=1,
                    style={'width': '100%', 'padding': '8px'}
                ),
            ], style={'width': '20%', 'display': 'inline-block', 'marginRight': '20px'}),

            html.Div([
                html.Label("Population Size:",
                          style={'fontWeight': 'bold', 'marginBottom': '5px'}),
                dcc.Input(
                    id='population-input',
                    type='number',
                    value=30,
                    min=1,
                    max=500,
                    step=1,
                    style={'width': '100%', 'padding': '8px'}
                ),
            ], style={'width': '20%', 'display': 'inline-block', 'marginRight': '20px'}),

            html.Div([
                html.Label("Seed:",
                          style={'fontWeight': 'bold', 'marginBottom': '5px'}),
                dcc.Input(
                    id='seed-input',
                    type='number',
                    value=42,
                    step=1,
                    style={'width': '100%', 'padding': '8px'}
                ),
            ], style={'width': '15%', 'display': 'inline-block', 'marginRight': '20px'}),

            html.Button('Run Training', id='run-button',
                       style={'width': '20%', 'padding': '10px', 'fontSize': '16px',
                              'backgroundColor': '#4CAF50', 'color': 'white',
                              'border': 'none', 'borderRadius': '5px', 'cursor': 'pointer'})
        ], style={'marginBottom': '30px', 'padding': '20px', 'backgroundColor': '#f5f5f5',
                  'borderRadius': '10px'}),

        html.Div(id='status-message', style={'marginBottom': '20px', 'fontSize': '14px'}),

        dcc.Loading(
            id="loading",
            type="default",
            children=[
                html.Div(id='results-container')
            ]
        )
    ], style={'maxWidth': '1400px', 'margin': '0 auto', 'padding': '20px'})
])


@app.callback(
    [Output("results-container", "children"), Output("status-message", "children")],
    [Input("run-button", "n_clicks")],
    [State("generations-input", "value"), State("population-input", "value"), State("seed-input", "value")],
)
def update_results(
    n_clicks: Optional[int], generations: int, population_size: int, seed: Optional[int]
) -> Tuple[Any, Any]:
    """Run a training session and update results"""
    if n_clicks is None:
        raise PreventUpdate

    if not generations or generations < 1 or generations > 200:
        return [], html.Div(
            "Error: Generations must be between 1 and 200.",
            style={"color": "red"},
        )

    try:
        params = EngineParams(
            population_size=int(population_size or 0),
            seed=int(seed) if seed is not None else None,
        )
        results = run_training(int(generations), engine_params=params)
    except (RacerError, ValueError) as e:
        return [], html.Div(f"Error: {e}", style={"color": "red"})

    status_msg = html.Div(
        f"Training complete! Ran {len(results['history'])} generations in {results['ticks']} ticks.",
        style={"color": "green"},
    )
    return create_results_layout(results["history"], results["analysis"]), status_msg


def create_results_layout(history: List[GenerationRecord], analysis: Dict[str, Any]) -> html.Div:
    """Create the results visualization layout"""
    generations = [r.generation for r in history]
    colors = px.colors.qualitative.Set1

    # 1. Best and average fitness per generation
    fig1 = go.Figure()
    fig1.add_trace(
        go.Scatter(
            x=generations,
            y=[r.best_fitness for r in history],
            mode="lines+markers",
            name="Best",
            line=dict(color=colors[0], width=2),
            hovertemplate="Generation %{x}<br>Best: %{y:.1f}<extra></extra>",
        )
    )
    fig1.add_trace(
        go.Scatter(
            x=generations,
            y=[r.average_fitness for r in history],
            mode="lines+markers",
            name="Average",
            line=dict(color=colors[1], width=2),
            hovertemplate="Generation %{x}<br>Average: %{y:.1f}<extra></extra>",
        )
    )
    fig1.update_layout(
        title="Fitness by Generation",
        xaxis_title="Generation",
        yaxis_title="Fitness",
        hovermode="closest",
        height=400,
        template="plotly_white",
    )

    # 2. Survivors at generation end
    fig2 = go.Figure()
    fig2.add_trace(
        go.Bar(
            x=generations,
            y=[r.alive_count for r in history],
            marker_color=["red" if r.alive_count == 0 else "green" for r in history],
            hovertemplate="Generation %{x}<br>Alive: %{y}<extra></extra>",
        )
    )
    fig2.update_layout(
        title="Cars Alive at Generation End",
        xaxis_title="Generation",
        yaxis_title="Cars",
        height=400,
        template="plotly_white",
    )

    # 3. Adaptive mutation strength
    fig3 = go.Figure()
    fig3.add_trace(
        go.Bar(
            x=generations,
            y=[r.mutation_strength for r in history],
            marker_color=["orange" if r.low_diversity else "steelblue" for r in history],
            text=["LOW" if r.low_diversity else "HIGH" for r in history],
            textposition="outside",
            hovertemplate="Generation %{x}<br>Strength: %{y:.2f}<extra></extra>",
        )
    )
    fig3.update_layout(
        title="Mutation Strength (diversity class)",
        xaxis_title="Generation",
        yaxis_title="Strength",
        height=400,
        template="plotly_white",
    )

    summary_rows = [
        ("Generations", analysis["generations"]),
        ("Best fitness", f"{analysis['best_fitness']:.2f}"),
        ("Best generation", analysis["best_generation"]),
        ("Best fitness trend (per generation)", f"{analysis['best_fitness_trend']:.2f}"),
        ("Improving", "Yes" if analysis["is_improving"] else "No"),
        ("Stagnant", "Yes" if analysis["is_stagnant"] else "No"),
        ("Survival rate", f"{analysis['survival_rate'] * 100:.1f}%"),
    ]
    table_rows = [html.Tr([html.Th("Metric"), html.Th("Value")])]
    for name, value in summary_rows:
        table_rows.append(html.Tr([html.Td(name), html.Td(value)]))

    return html.Div([
        html.H2("Training Results", style={"marginTop": "30px", "marginBottom": "20px"}),
        html.Div([
            html.H3("Summary Table", style={"marginBottom": "15px"}),
            html.Table(
                table_rows,
                style={
                    "width": "100%",
                    "borderCollapse": "collapse",
                    "marginBottom": "30px",
                    "fontSize": "14px",
                },
            ),
        ], style={"marginBottom": "30px"}),
        html.Div([
            html.Div([dcc.Graph(figure=fig1)], style={"marginBottom": "30px"}),
            html.Div([
                html.Div(
                    [dcc.Graph(figure=fig2)],
                    style={"width": "48%", "display": "inline-block", "marginRight": "2%"},
                ),
                html.Div(
                    [dcc.Graph(figure=fig3)],
                    style={"width": "48%", "display": "inline-block"},
                ),
            ], style={"marginBottom": "30px"}),
        ]),
    ])


if __name__ == "__main__":
    app.run(debug=True, port=8050)

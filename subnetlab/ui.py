"""
Gradio UI for SubnetLab.
"""

import gradio as gr

from .problems import Difficulty, ExerciseKind
from .tools import (
    check_exercise,
    classful_calculator,
    generate_exercise,
    ip_info,
    summary_route,
    vlsm_calculator,
)


EXERCISE_KINDS = [kind.value for kind in ExerciseKind]
DIFFICULTIES = [level.value for level in Difficulty]


def create_interface():
    """Create the Gradio interface."""

    # Separate interfaces so each tool is exposed to MCP clients
    ip_interface = gr.Interface(
        fn=ip_info,
        api_name="ip_info",
        inputs=[
            gr.Textbox(label="IP Address", placeholder="192.168.1.10"),
            gr.Textbox(label="Subnet Mask", placeholder="/24 or 255.255.255.0")
        ],
        outputs=gr.Textbox(label="Analysis Result"),
        title="IP Info",
        description="Analyze IPv4 addresses with subnet masks"
    )

    classful_interface = gr.Interface(
        fn=classful_calculator,
        api_name="classful_calculator",
        inputs=[
            gr.Textbox(label="Classful Network", placeholder="172.16.0.0"),
            gr.Dropdown(label="Division Type", choices=["subnets", "hosts"], value="subnets"),
            gr.Textbox(label="Number", placeholder="6", value="")
        ],
        outputs=gr.Textbox(label="Calculation Result"),
        title="Classful Calculator",
        description="Divide a class A, B or C network into equal subnets"
    )

    vlsm_interface = gr.Interface(
        fn=vlsm_calculator,
        api_name="vlsm_calculator",
        inputs=[
            gr.Textbox(label="Network", placeholder="192.168.1.0/24"),
            gr.Textbox(label="Hosts per Subnet", placeholder="100,50,10"),
            gr.Textbox(label="Subnet Names (optional)", placeholder="Sales,Engineering,Servers", value="")
        ],
        outputs=gr.Textbox(label="Calculation Result"),
        title="VLSM Calculator",
        description="Allocate variable-length subnets, largest requirement first"
    )

    summary_interface = gr.Interface(
        fn=summary_route,
        api_name="summary_route",
        inputs=gr.Textbox(label="Networks", placeholder="192.168.0.0, 192.168.1.0, 192.168.2.0", lines=4),
        outputs=gr.Textbox(label="Summary Route"),
        title="Route Summary",
        description="Find the smallest route that covers every network in the list"
    )

    exercise_interface = gr.Interface(
        fn=generate_exercise,
        api_name="generate_exercise",
        inputs=[
            gr.Dropdown(label="Exercise Type", choices=EXERCISE_KINDS, value=EXERCISE_KINDS[0]),
            gr.Dropdown(label="Difficulty", choices=DIFFICULTIES, value="easy"),
            gr.Textbox(label="Seed (optional)", placeholder="42", value="")
        ],
        outputs=gr.Textbox(label="Exercise", lines=20, interactive=False),
        title="Exercise Generator",
        description="Generate random subnetting exercises with solutions and step-by-step feedback. Reuse the seed to get the same exercise again."
    )

    check_interface = gr.Interface(
        fn=check_exercise,
        api_name="check_exercise",
        inputs=[
            gr.Dropdown(label="Exercise Type", choices=EXERCISE_KINDS, value=EXERCISE_KINDS[0]),
            gr.Dropdown(label="Difficulty", choices=DIFFICULTIES, value="easy"),
            gr.Textbox(label="Seed", placeholder="42"),
            gr.Textbox(label="Answers (JSON)", placeholder='{"network": "192.168.1.0", "mask_cidr": "/26"}', lines=6)
        ],
        outputs=gr.Textbox(label="Result", lines=12, interactive=False),
        title="Answer Checker",
        description="Check your answers to a seeded exercise"
    )

    with gr.Blocks() as combined_app:
        gr.Markdown("""
        # SubnetLab

        **SubnetLab** is an IPv4 subnetting calculator and practice tool:

        - **IP Info**: Analyze an IPv4 address with its mask, in decimal, binary or CIDR format
        - **Classful Calculator**: Split a class A, B or C network for a number of subnets or hosts per subnet
        - **VLSM Calculator**: Allocate right-sized subnets from a base block
        - **Route Summary**: Aggregate a list of networks into one route
        - **Exercise Generator** and **Answer Checker**: Practice with reproducible random exercises

        Choose a tab below to get started.
        """)

        with gr.Tabs():
            with gr.Tab("IP Info"):
                ip_interface.render()
            with gr.Tab("Classful Calculator"):
                classful_interface.render()
            with gr.Tab("VLSM Calculator"):
                vlsm_interface.render()
            with gr.Tab("Route Summary"):
                summary_interface.render()
            with gr.Tab("Exercise Generator"):
                exercise_interface.render()
            with gr.Tab("Answer Checker"):
                check_interface.render()

    return combined_app

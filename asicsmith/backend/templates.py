# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""In-memory Jinja2 templates for the backend scripts.

Templates are kept as module strings (served through a DictLoader) so that
rendering never touches the filesystem.
"""

import shlex

from jinja2 import DictLoader, Environment, StrictUndefined

SYNTHESIS_TEMPLATE = """\

# ASIC Synthesis Script for {{ design_name }}
# Generated by asicsmith

# Read design files
{% for source in sources %}
read_verilog {% if source.endswith(".sv") %}-sv {% endif %}{{ source }}
{% endfor %}
read_verilog {{ design_file }}

# Hierarchy check
hierarchy -check -top {{ design_name }}

# High-level synthesis
proc; opt; fsm; opt; memory; opt

# Technology mapping
techmap; opt

# Map to standard cells
dfflibmap -liberty {{ liberty_path }}
abc -liberty {{ liberty_path }}

# Write synthesized netlist
write_verilog -noattr {{ netlist_path }}
write_liberty {{ output_dir }}/{{ design_name }}.lib

# Write statistics
stat -liberty {{ liberty_path }}
"""

BACKEND_CONFIG_TEMPLATE = """\

# LibreLane Configuration for {{ design_name }}
# Generated by asicsmith

set ::env(DESIGN_NAME) "{{ design_name }}"
set ::env(VERILOG_FILES) "{{ netlist_path }}"
set ::env(PDK) "{{ pdk }}"
set ::env(STD_CELL_LIBRARY) "{{ library }}"

# Design configuration
set ::env(CLOCK_PERIOD) "{{ clock_period }}"
set ::env(CLOCK_PORT) "{{ clock_port }}"
set ::env(CLOCK_NET) "{{ clock_net }}"

# Floorplan configuration
set ::env(DIE_AREA) "{{ die_area }}"
set ::env(PLACE_SITE) "{{ place_site }}"
set ::env(PLACE_DENSITY) "{{ place_density }}"

# Synthesis configuration
set ::env(SYNTH_STRATEGY) "{{ synth_strategy }}"
set ::env(SYNTH_MAX_FANOUT) "{{ synth_max_fanout }}"

# Place and Route configuration
set ::env(ROUTING_STRATEGY) "{{ routing_strategy }}"

# Timing configuration
set ::env(STA_WRITE_LIB) "1"
set ::env(STA_USE_ARC_ENERGY) "1"

# Power configuration
set ::env(POWER_OPTIMIZATION) "1"

# Verification
set ::env(RUN_KLAYOUT_DRC) "1"
set ::env(RUN_KLAYOUT_XOR) "1"
"""

LAUNCHER_TEMPLATE = """\
{{ shebang }}
set -e

cd {{ output_dir | quote }}
{% for name, value in environment.items() %}
export {{ name }}={{ value | quote }}
{% endfor %}

# Run {{ flow_name }} flow
{{ flow_command }}
"""

DESIGN_FILE_TEMPLATE = """\
{% for module in modules %}
// Module: {{ module.name }}
{% if module.ports %}
module {{ module.name }}(
{% for port in module.ports %}
  {{ port.direction }} wire {% if port.width > 1 %}[{{ port.width - 1 }}:0] {% endif %}{{ port.name }}{{ "," if not loop.last else "" }}
{% endfor %}
);
{% else %}
module {{ module.name }}();
{% endif %}
  // Body is produced by the upstream RTL emitter
endmodule

{% endfor %}
"""

_TEMPLATES = {
    "synthesize.tcl": SYNTHESIS_TEMPLATE,
    "config.tcl": BACKEND_CONFIG_TEMPLATE,
    "launcher.sh": LAUNCHER_TEMPLATE,
    "design.v": DESIGN_FILE_TEMPLATE,
}

env = Environment(
    loader=DictLoader(_TEMPLATES),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    autoescape=False,
)
env.filters["quote"] = shlex.quote


def render(name: str, **context) -> str:
    """Render one of the built-in templates by name."""
    return env.get_template(name).render(**context)

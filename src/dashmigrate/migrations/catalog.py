"""Ordered catalog of dashboard schema steps.

Each entry is a step module. Adding a format revision means writing a new
``vNN_description.py`` module, appending it here and bumping
``LATEST_VERSION``.
"""

from dashmigrate.migrations import (
    v14_graph_tooltip,
    v16_grid_layout,
    v17_max_per_row,
    v18_gauge_options,
    v19_panel_links,
    v20_data_link_variables,
    v21_field_label_links,
    v22_table_style_align,
    v23_variable_current_multi,
    v24_table_old,
    v26_text_panel,
    v27_constant_variables,
    v28_singlestat_to_stat,
    v29_query_variable_refresh,
    v30_value_mappings,
    v31_labels_to_fields_merge,
    v33_panel_datasource_refs,
    v34_cloudwatch_statistics,
    v35_x_axis_visibility,
    v36_datasource_defaults,
    v37_legend_show,
    v38_table_cell_options,
    v39_timeseries_table_stats,
    v40_refresh_string,
    v41_timepicker_time_options,
)

STEP_MODULES = (
    v14_graph_tooltip,
    v16_grid_layout,
    v17_max_per_row,
    v18_gauge_options,
    v19_panel_links,
    v20_data_link_variables,
    v21_field_label_links,
    v22_table_style_align,
    v23_variable_current_multi,
    v24_table_old,
    v26_text_panel,
    v27_constant_variables,
    v28_singlestat_to_stat,
    v29_query_variable_refresh,
    v30_value_mappings,
    v31_labels_to_fields_merge,
    v33_panel_datasource_refs,
    v34_cloudwatch_statistics,
    v35_x_axis_visibility,
    v36_datasource_defaults,
    v37_legend_show,
    v38_table_cell_options,
    v39_timeseries_table_stats,
    v40_refresh_string,
    v41_timepicker_time_options,
)

# Format revisions that changed nothing a stored document carries
SKIPPED_VERSIONS = frozenset({15, 25, 32})

LATEST_VERSION = 41

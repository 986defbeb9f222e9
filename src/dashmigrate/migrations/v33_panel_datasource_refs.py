"""Replace panel and query data source names with references.

Names are resolved through the data source index. The default data source
stays ``null`` on panels (meaning "use whatever is default when rendered")
and is left alone on queries. Names the index doesn't know become
``{"uid": name}``.
"""

from dashmigrate.datasources import EMPTY_INDEX, DataSourceIndex
from dashmigrate.document import Document, get_list, iter_panels, mappings

VERSION = 33
DESCRIPTION = "Convert panel and target datasource names to references"
USES_DATASOURCES = True


def upgrade(dashboard: Document, datasources: DataSourceIndex = EMPTY_INDEX) -> None:
    for panel in iter_panels(dashboard):
        if "datasource" in panel:
            panel["datasource"] = datasources.to_ref(panel["datasource"], default_as_null=True)

        for target in mappings(get_list(panel, "targets")):
            ref = datasources.to_ref(target.get("datasource"), default_as_null=True)
            if ref is not None:
                target["datasource"] = ref

"""
Document assembly

Wraps compiled body markup in the standalone HTML shell: base and print CSS,
the Chart.js loader, the optional watermark, the runtime config island and
the runtime program.
"""
from typing import Any, Iterable, List, Optional

from core.config import Settings, get_settings
from core.logging import get_logger
from report_export.models import ExportOptions, RuntimeComponentConfig
from report_export.runtime import RUNTIME_CONFIG_ELEMENT_ID, build_runtime_config, render_runtime_script
from report_export.styles import generate_print_styles
from report_export.templating import TemplateEngine

logger = get_logger(__name__, domain="report_export")

BASE_CSS = """    * {
      box-sizing: border-box;
      margin: 0;
      padding: 0;
    }

    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
      font-size: 14px;
      line-height: 1.5;
      color: #000;
      background: #fff;
    }

    #report {
      position: relative;
      width: 100%;
      min-height: 100vh;
    }

    .report-page {
      position: relative;
      page-break-inside: avoid;
    }

    .page-break {
      page-break-after: always;
      break-after: page;
      height: 0;
      margin: 0;
      padding: 0;
    }

    [data-condition-hidden] {
      display: none !important;
    }"""

CHART_SCRIPT_TEMPLATE = """{% if chart_fallback_urls %}<script>
(function () {
  var cdnUrls = {{ chart_fallback_urls|tojson }};
  function loadScript(url) {
    var script = document.createElement('script');
    script.src = url;
    script.onload = function () {
      window.dispatchEvent(new Event('chartjs-loaded'));
    };
    script.onerror = function () {
      console.warn('[ReportRuntime] Failed to load Chart.js from: ' + url);
      if (cdnUrls.length > 0) {
        loadScript(cdnUrls.shift());
      }
    };
    document.head.appendChild(script);
  }
  loadScript(cdnUrls.shift());
})();
</script>{% else %}<script src="{{ chart_js_url }}"></script>{% endif %}"""

WATERMARK_TEMPLATE = """<div id="watermark" style="position: fixed; bottom: 20px; right: 20px; padding: 8px 16px; background: rgba(0,0,0,0.7); color: white; font-size: 12px; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; border-radius: 4px; z-index: 9999; pointer-events: none;">
  {{ watermark_text }}
</div>
<style>
@media print {
  #watermark {
    position: fixed;
    bottom: 10px;
    right: 10px;
    font-size: 10px;
    background: rgba(200,200,200,0.3);
    color: #666;
  }
}
</style>"""

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ title }}</title>

  <style>
{{ base_css|safe }}

    {{ print_css|safe }}
  </style>

  {% include "chart_script.html" %}
</head>
<body>
  <div id="report">
{{ body|safe }}
  </div>
{% if watermark_text %}
{% include "watermark.html" %}
{% endif %}
  <script type="application/json" id="{{ config_element_id }}">{{ runtime_config|tojson }}</script>

  <script>
{{ runtime_script|safe }}
  </script>
</body>
</html>
"""


class DocumentAssembler:
    """Renders the final HTML document around compiled widget markup"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.engine = TemplateEngine(
            {
                "document.html": DOCUMENT_TEMPLATE,
                "chart_script.html": CHART_SCRIPT_TEMPLATE,
                "watermark.html": WATERMARK_TEMPLATE,
            }
        )

    def chart_fallback_urls(self, options: ExportOptions) -> List[str]:
        if not options.chart_cdn_fallbacks:
            return []
        return [self.settings.chart_js_cdn_url, *self.settings.chart_js_fallback_urls]

    def assemble(
        self,
        body_html: str,
        components: Iterable[RuntimeComponentConfig],
        sample_data: Any,
        options: ExportOptions,
    ) -> str:
        """Build the complete standalone document"""
        margins = options.margins.model_dump()
        html = self.engine.render_template(
            "document.html",
            title=options.filename,
            base_css=BASE_CSS,
            print_css=generate_print_styles(options.page_size.value, margins),
            chart_js_url=self.settings.chart_js_cdn_url,
            chart_fallback_urls=self.chart_fallback_urls(options),
            body=body_html,
            watermark_text=self.settings.watermark_text if options.include_watermark else "",
            config_element_id=RUNTIME_CONFIG_ELEMENT_ID,
            runtime_config=build_runtime_config(components, sample_data, options, self.settings),
            runtime_script=render_runtime_script(),
        )
        logger.debug(f"Assembled document '{options.filename}' ({len(html)} bytes)")
        return html

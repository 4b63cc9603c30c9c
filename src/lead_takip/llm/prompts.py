from __future__ import annotations

from jinja2 import Template


def render_prompt(template_str: str, **kwargs) -> str:
    tpl = Template(template_str)
    return tpl.render(**kwargs).strip()


TEMPLATE_SQL = """\
You are a SQL expert for a Turkish real estate lead tracking system. Generate precise SQLite queries.

Database Schema:
{{ schema }}

Key Turkish Terms:
- "satılık" or "satis" = sales leads
- "kiralık" or "kiralama" = rental leads
- "Instagram", "Facebook", "Referans" = lead sources (first_customer_source)
- "personel" = sales personnel (assigned_personnel)
- "durum" or "status" = lead status
- "tarih" = date (request_date)
- "müşteri" = customer
- "proje" = project (project_name)

Important Notes:
- Use exact column names from the schema
- lead_type values: 'satis' (sales), 'kiralama' (rental), 'Tanımsız'
- request_date is TEXT in the form YYYY-MM-DD, use strftime() for months and years
- Only read data: a single SELECT (or WITH ... SELECT) statement
- Always include LIMIT for large datasets

User Query: {{ question }}

Generate only the SQL query without explanations:
"""


TEMPLATE_INTERPRET = """\
You are analyzing real estate lead data. Provide a clear Turkish summary and suggest charts when appropriate.

Original Question: {{ question }}
SQL Query: {{ sql }}
Results: {{ results }}

Provide response in this JSON format:
{
  "summary": "Clear Turkish explanation of the results",
  "chartSpec": {
    "type": "pie" | "bar" | "line",
    "title": "Chart title in Turkish",
    "labels": ["label1", "label2"],
    "data": [value1, value2],
    "colors": ["#color1", "#color2"]
  }
}

Guidelines:
- Always respond in Turkish
- Include chartSpec only for data that benefits from visualization
- Use appropriate chart types: pie for distributions, bar for comparisons, line for trends
- Use brand colors: {% for name, color in brand_colors.items() %}{{ name }} {{ color }}{% if not loop.last %}, {% endif %}{% endfor %}
- Summarize key insights and trends

Response:
"""

from dataclasses import dataclass, fields


@dataclass(frozen=True, slots=True)
class Cfg:
    """Minification options. Immutable and picklable, so one instance can be
    shared by every worker of a batch run."""

    minify_js: bool = False
    minify_css: bool = False
    do_not_minify_doctype: bool = False
    ensure_spec_compliant_unquoted_attribute_values: bool = False
    keep_closing_tags: bool = False
    keep_html_and_head_opening_tags: bool = False
    keep_spaces_between_attributes: bool = False
    keep_comments: bool = False
    keep_input_type_text_attr: bool = False
    # SSI comments are directives for the web server, not decoration
    keep_ssi_comments: bool = True
    preserve_brace_template_syntax: bool = False
    preserve_chevron_percent_template_syntax: bool = False
    remove_bangs: bool = False
    remove_processing_instructions: bool = False

    @classmethod
    def option_names(cls):
        return [field.name for field in fields(cls)]


DEFAULT_CFG = Cfg()

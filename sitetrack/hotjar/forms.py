from django import forms
from django.utils.translation import gettext_lazy as _

from sitetrack.hotjar.visibility import (
    PageVisibility,
    RoleVisibility,
    is_valid_page_pattern,
    parse_pages,
)


class RolesField(forms.Field):
    """A list of role identifiers. Empty entries are dropped."""

    def to_python(self, value):
        if not value:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(str(role).strip() for role in value if role and str(role).strip())


class HotjarSettingsForm(forms.Form):
    account = forms.CharField(
        label=_("Hotjar ID"),
        max_length=20,
        help_text=_(
            "Your Hotjar ID can be found in your tracking code on the line "
            "h._hjSettings={hjid:12345,hjsv:6}; where 12345 is your Hotjar ID"
        ),
    )
    snippet_version = forms.CharField(
        label=_("Hotjar snippet version"),
        max_length=10,
        help_text=_(
            "Your Hotjar snippet version is near your Hotjar ID "
            "h._hjSettings={hjid:12345,hjsv:6}; where 6 is your Hotjar "
            "snippet version"
        ),
    )
    visibility_pages = forms.TypedChoiceField(
        label=_("Add tracking to specific pages"),
        choices=[
            (PageVisibility.EXCLUDE_LISTED.value,
             _("Every page except the listed pages")),
            (PageVisibility.INCLUDE_LISTED_ONLY.value,
             _("The listed pages only")),
        ],
        coerce=lambda value: PageVisibility(int(value)),
    )
    pages = forms.CharField(
        label=_("Pages"),
        required=False,
        widget=forms.Textarea(attrs={'rows': 10}),
        help_text=_(
            "Specify pages by using their paths. Enter one path per line. "
            "The '*' character at the end of a path is a wildcard. Example "
            "paths are /blog for the blog page and /blog/* for every blog "
            "post. <front> is the front page."
        ),
    )
    visibility_roles = forms.TypedChoiceField(
        label=_("Add tracking for specific roles"),
        choices=[
            (RoleVisibility.INCLUDE_LISTED_ONLY.value,
             _("Add to the selected roles only")),
            (RoleVisibility.EXCLUDE_LISTED.value,
             _("Add to every role except the selected ones")),
        ],
        coerce=lambda value: RoleVisibility(int(value)),
    )
    roles = RolesField(
        label=_("Roles"),
        required=False,
        help_text=_(
            "If none of the roles are selected, all users will be tracked. "
            "If a user has any of the roles checked, that user will be "
            "tracked (or excluded, depending on the setting above)."
        ),
    )

    def clean_pages(self):
        pages = parse_pages(self.cleaned_data['pages'])
        for page in pages:
            if not is_valid_page_pattern(page):
                # Only the first offending path is reported.
                raise forms.ValidationError(
                    _('Path "%(page)s" not prefixed with slash.'),
                    params={'page': page},
                )
        return pages

# Copyright (C) 2025  Technische Universitaet Berlin
#
# This library is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 3 of the License, or (at your option) any later version.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this library; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301
# USA

"""Configuration and definition objects for fragmentation and spectrum annotation."""
import json
import yaml
import re
import copy
from pyteomics.mass import calculate_mass, Composition
from . import const

# Unique sentinel, used to allow None to be a valid default for a setting.
NO_DEFAULT = object()


class Setting:
    """A setting supported by the config system."""

    def __init__(self, type, default=NO_DEFAULT, valid_values=None, required=True):
        """
        Initialise the Setting.

        :param type: Python type expected for this setting.
        :param default: Default value for this setting.
        :param valid_values: Tuple of accepted values, re pattern, or None to accept any value.
        :param required: (bool) if True a value has to be given when no default exists
        """
        self.type = type
        self.valid_values = valid_values
        if default is not NO_DEFAULT:
            try:
                self.default = self.accept(default)
            except TypeError:
                raise TypeError("Default '%s' is not valid and could not be coerced "
                                "into the expected type (%s)" % (repr(default),
                                                                 repr(self.type))) from None
            self.required = False
        else:
            self.required = required

    def accept(self, value):
        """
        Coerce a value and check that it is valid.

        :param value: (mixed) value to check
        :return: (mixed) the coerced value
        """
        coerced_value = self.coerce(value)
        if self.valid_values is not None:
            if isinstance(self.valid_values, re.Pattern):
                if self.valid_values.match(coerced_value) is None:
                    raise ValueError(f'{coerced_value} is not valid!'
                                     f' Valid values need to match: {self.valid_values.pattern}')
            elif coerced_value not in self.valid_values:
                raise ValueError(f'{coerced_value} is not valid!'
                                 f' Valid values are: {self.valid_values}')
        return coerced_value

    def coerce(self, value):
        """
        Coerce a value into the correct type.

        Strings naming a constant defined on the type (e.g. 'H2O' for NeutralLoss.H2O) are
        resolved to that constant.

        :param value: (mixed) value to coerce
        :return: (mixed) coerced value
        """
        if isinstance(value, self.type):
            return value
        try:
            if isinstance(value, dict):
                return self.type(**value)
            elif isinstance(value, str) and value in self.type.__dict__:
                return self.type.__dict__[value]
            else:
                return self.type(value)
        except ValueError:
            raise TypeError from None


class ListSetting(Setting):
    """A Setting holding a list of values of the same type."""

    def accept(self, values):
        """
        Coerce and check every element; a single value is wrapped into a list.

        :param values: (list) values to check
        :return: (list) coerced values
        """
        if not isinstance(values, (list, tuple)):
            values = [values]
        return [super(ListSetting, self).accept(value) for value in values]


class ConfigMeta(type):
    """Metaclass used to define configuration groups."""

    def __new__(cls, name, bases, attributes):
        """Create a new instance."""
        settings = {k: a for k, a in attributes.items() if isinstance(a, Setting)}
        others = {k: a for k, a in attributes.items() if k not in settings}
        defaults = {k: s.default for k, s in settings.items() if hasattr(s, 'default')}
        required = set([k for k, s in settings.items() if s.required])
        new_attributes = dict(_settings=settings, _defaults=defaults, _required=required,
                              **others)
        return type.__new__(cls, name, bases, new_attributes)


class ConfigGroup(metaclass=ConfigMeta):
    """Base class for configuration groups."""

    def __init__(self, **kwargs):
        """Initialise the ConfigGroup."""
        self._values = {}
        for key, value in kwargs.items():
            if key not in self._settings:
                raise KeyError("Unknown setting '%s'" % key)
            setattr(self, key, value)

        # transfer defaults to those values that are not set explicitly
        for k in self._defaults:
            if k not in kwargs:
                setattr(self, k, copy.deepcopy(self._defaults[k]))

        for setting in self._required:
            if setting not in kwargs:
                raise AttributeError("'%s' is required but not defined" % setting) from None

    def __setattr__(self, key, value):
        """Set the value of a Setting."""
        if key.startswith('_') or key not in self._settings:
            super(ConfigGroup, self).__setattr__(key, value)
            return
        setting = self._settings[key]
        try:
            self._values[key] = setting.accept(value)
        except TypeError:
            raise TypeError("Value '%s' is not valid for '%s' and could not be coerced "
                            "into the expected type (%s)" % (repr(value), key,
                                                             repr(setting.type))) from None
        except ValueError:
            raise ValueError("Value '%s' is not valid for '%s'" % (repr(value), key)) from None

    def __contains__(self, key):
        """Check if a Setting has a value in the ConfigGroup."""
        return key in self._values

    def __getattr__(self, key):
        """Get the value for a Setting."""
        if key.startswith('_') or key not in self._settings:
            return super(ConfigGroup, self).__getattribute__(key)
        elif key in self._values:
            return self._values[key]
        else:
            raise AttributeError(key)

    def __eq__(self, other):
        """Check if two ConfigGroups are equal."""
        if type(other) is type(self):
            return vars(self) == vars(other)
        return False

    @classmethod
    def from_json(cls, json_string):
        """Create a ConfigGroup from a JSON string."""
        return cls(**json.loads(json_string))

    @classmethod
    def from_yaml(cls, yaml_string):
        """Create a ConfigGroup from a YAML string."""
        return cls(**yaml.safe_load(yaml_string))

    @staticmethod
    def _value_to_dict(value, excl_defaults):
        if isinstance(value, ConfigGroup):
            return value.to_dict(excl_defaults=excl_defaults) or {}
        if isinstance(value, list):
            return [ConfigGroup._value_to_dict(v, excl_defaults) for v in value]
        return value

    def to_dict(self, excl_defaults=True):
        """
        Convert the ConfigGroup to a dictionary.

        :param excl_defaults: (bool) exclude values that equal their default
        :return: (dict) dictionary representation, None if nothing is left
        """
        values = {}
        for k, value in self._values.items():
            if value is None:
                continue
            if excl_defaults and k in self._defaults and self._defaults[k] == value:
                continue
            values[k] = self._value_to_dict(value, excl_defaults)

        if len(values) == 0:
            return None
        return values

    def to_json(self, excl_defaults=True):
        """Convert the ConfigGroup to a JSON string."""
        return json.dumps(self.to_dict(excl_defaults=excl_defaults))

    def write(self, file_name, excl_defaults=True):
        """Write the ConfigGroup to a JSON file."""
        with open(file_name, "w") as outfile:
            json.dump(self.to_dict(excl_defaults=excl_defaults), outfile, indent='\t')

    def write_yaml(self, file_name, excl_defaults=True):
        """Write the ConfigGroup to a YAML file."""
        with open(file_name, "w") as outfile:
            yaml.dump(self.to_dict(excl_defaults=excl_defaults), outfile)


class ToleranceContainer():
    """Mixin class for ConfigGroups that contain tolerances."""

    _re_ms_tol = const.MS_TOLERANCE

    def parse_ms_tol(self, str_tol):
        """Parse a tolerance string into a float value and unit string."""
        re_ms_tol = re.compile(r"([0-9.]+)\s*(da|th|ppm)", re.IGNORECASE)
        tol, unit = re_ms_tol.search(str_tol).groups()
        return float(tol), unit.lower()

    def translate_ms_tol(self, str_tol):
        """
        Translate a tolerance string into a numeric value and a ppm flag.

        :param str_tol: (str) e.g. '10 ppm' or '0.02 Da'
        :return: (float, bool) tolerance value, True if the value is in ppm
        """
        tol, unit = self.parse_ms_tol(str_tol)
        if unit in ('da', 'th'):
            return tol, False
        elif unit == 'ppm':
            return tol, True
        raise ValueError('MS tolerance must be given in ppm, da, or th.')


def _mass_from_composition(kwargs):
    """Derive 'mass' from 'composition' in constructor arguments, if a composition is given."""
    if kwargs.get('composition') is not None:
        kwargs['mass'] = calculate_mass(formula=kwargs['composition'])
    return kwargs


class NeutralLoss(ConfigGroup):
    """
    Neutral loss definition.

    The mass is derived from the composition when one is given, otherwise the scalar `mass`
    is used.
    """

    def __init__(self, **kwargs):
        """Initialise the NeutralLoss."""
        super().__init__(**_mass_from_composition(kwargs))
        if 'mass' not in self._values:
            raise AttributeError("Neutral loss '%s' needs a composition or a mass" % self.name)

    """Name of the loss"""
    name = Setting(str)

    """Chemical composition of the loss as a string, e.g. H2O1"""
    composition = Setting(str, required=False)

    """Mass loss in Dalton"""
    mass = Setting(float, required=False)

    """Fixed losses are always considered, not only from a residue that can throw them"""
    fixed = Setting(bool, False)

    """What can throw this loss. Amino acids in one letter code, "nterm" or "cterm" for termini"""
    specificity = ListSetting(str, [])

    def is_same_as(self, other):
        """
        Check if two losses describe the same chemical loss.

        Same name and same composition, or same name and same mass when a composition is
        missing.
        """
        if self.name != other.name:
            return False
        if 'composition' in self and 'composition' in other:
            return Composition(formula=self.composition) == Composition(formula=other.composition)
        return self.mass == other.mass

    def __repr__(self):
        return 'NeutralLoss(%s, %.6f)' % (self.name, self.mass)


NeutralLoss.H2O = NeutralLoss(name='H2O', composition='H2O', specificity=['S', 'T', 'D', 'E'])
NeutralLoss.NH3 = NeutralLoss(name='NH3', composition='NH3', specificity=['K', 'N', 'Q', 'R'])
NeutralLoss.H3PO4 = NeutralLoss(name='H3PO4', composition='H3PO4', specificity=['S', 'T'])
NeutralLoss.HPO3 = NeutralLoss(name='HPO3', composition='HPO3', specificity=['Y'])
NeutralLoss.CH4OS = NeutralLoss(name='CH4OS', composition='CH4OS', specificity=['M'])
NeutralLoss.C3H9N = NeutralLoss(name='C3H9N', composition='C3H9N', specificity=['K'])


class ReporterIonDefinition(ConfigGroup):
    """Reporter ion definition; the mass is that of the neutral species."""

    def __init__(self, **kwargs):
        """Initialise the ReporterIonDefinition."""
        super().__init__(**_mass_from_composition(kwargs))
        if 'mass' not in self._values:
            raise AttributeError("Reporter ion '%s' needs a composition or a mass" % self.name)

    """Name of the reporter ion"""
    name = Setting(str)

    """Chemical composition, isotopes in pyteomics syntax, e.g. C5C[13]1H12N2"""
    composition = Setting(str, required=False)

    """Mass in Dalton"""
    mass = Setting(float, required=False)


ReporterIonDefinition.iTRAQ4Plex_114 = ReporterIonDefinition(name='iTRAQ4Plex_114',
                                                             composition='C5C[13]1H12N2')
ReporterIonDefinition.iTRAQ4Plex_115 = ReporterIonDefinition(name='iTRAQ4Plex_115',
                                                             composition='C4C[13]2H12N1N[15]1')
ReporterIonDefinition.iTRAQ4Plex_116 = ReporterIonDefinition(name='iTRAQ4Plex_116',
                                                             composition='C3C[13]3H12N1N[15]1')
ReporterIonDefinition.iTRAQ4Plex_117 = ReporterIonDefinition(name='iTRAQ4Plex_117',
                                                             composition='C2C[13]4H12N1N[15]1')
ReporterIonDefinition.TMT_126 = ReporterIonDefinition(name='TMT_126', composition='C8H15N1')
ReporterIonDefinition.TMT_127N = ReporterIonDefinition(name='TMT_127N', composition='C8H15N[15]1')
ReporterIonDefinition.TMT_127C = ReporterIonDefinition(name='TMT_127C',
                                                       composition='C7C[13]1H15N1')
ReporterIonDefinition.TMT_128N = ReporterIonDefinition(name='TMT_128N',
                                                       composition='C7C[13]1H15N[15]1')
ReporterIonDefinition.TMT_128C = ReporterIonDefinition(name='TMT_128C',
                                                       composition='C6C[13]2H15N1')
ReporterIonDefinition.TMT_129N = ReporterIonDefinition(name='TMT_129N',
                                                       composition='C6C[13]2H15N[15]1')
ReporterIonDefinition.TMT_129C = ReporterIonDefinition(name='TMT_129C',
                                                       composition='C5C[13]3H15N1')
ReporterIonDefinition.TMT_130N = ReporterIonDefinition(name='TMT_130N',
                                                       composition='C5C[13]3H15N[15]1')
ReporterIonDefinition.TMT_130C = ReporterIonDefinition(name='TMT_130C',
                                                       composition='C4C[13]4H15N1')
ReporterIonDefinition.TMT_131 = ReporterIonDefinition(name='TMT_131',
                                                      composition='C4C[13]4H15N[15]1')
ReporterIonDefinition.ACE_K_126 = ReporterIonDefinition(name='aceK126', composition='C7H11NO')
ReporterIonDefinition.ACE_K_143 = ReporterIonDefinition(name='aceK143', composition='C7H14N2O')
ReporterIonDefinition.PHOSPHO_Y = ReporterIonDefinition(name='pY', composition='C8H10NPO4')


MODIFICATION_TYPES = (
    'at_residue',
    'nterm_protein', 'nterm_protein_at_residue',
    'cterm_protein', 'cterm_protein_at_residue',
    'nterm_peptide', 'nterm_peptide_at_residue',
    'cterm_peptide', 'cterm_peptide_at_residue',
)


class Modification(ConfigGroup):
    """Modification (PTM) definition."""

    def __init__(self, **kwargs):
        """Initialise the Modification."""
        super().__init__(**_mass_from_composition(kwargs))
        if 'mass' not in self._values:
            raise AttributeError("Modification '%s' needs a composition or a mass" % self.name)
        if 'short_name' not in self._values:
            self.short_name = self.name

    """Unique name of the modification, e.g. 'Phosphorylation of S'"""
    name = Setting(str)

    """Short name used in modified sequences, e.g. 'ph'"""
    short_name = Setting(str, required=False)

    """
    Where the modification can sit:
        - at_residue: side chain of a residue anywhere in the peptide
        - nterm_protein / cterm_protein: protein terminus, any residue
        - nterm_peptide / cterm_peptide: peptide terminus, any residue
        - *_at_residue variants: terminus, but only on the residues in the specificity
    """
    type = Setting(str, 'at_residue', valid_values=MODIFICATION_TYPES)

    """Chemical composition of the modification as a string, e.g. H1O3P1"""
    composition = Setting(str, required=False)

    """Mass delta in Dalton"""
    mass = Setting(float, required=False)

    """Amino acids that can be modified, one letter code, "X" for any amino acid"""
    specificity = ListSetting(str, ['X'])

    """Neutral losses this modification can throw"""
    neutral_losses = ListSetting(NeutralLoss, [])

    """Reporter ions this modification produces"""
    reporter_ions = ListSetting(ReporterIonDefinition, [])

    @property
    def is_nterm(self):
        return self.type.startswith('nterm')

    @property
    def is_cterm(self):
        return self.type.startswith('cterm')

    @property
    def is_residue_specific(self):
        """True if the specificity restricts the residue the modification sits on."""
        return self.type == 'at_residue' or self.type.endswith('_at_residue')

    def targets(self, residue):
        """Check if the modification can sit on this residue."""
        if not self.is_residue_specific:
            return True
        return 'X' in self.specificity or residue in self.specificity

    def __repr__(self):
        return 'Modification(%s, %.6f)' % (self.name, self.mass)


Modification.UNKNOWN = Modification(name='unknown', short_name='unknown', mass=0.0)


class FragmentationConfig(ConfigGroup):
    """Fragmentation configuration."""

    """Names of the neutral losses considered for every peptide"""
    default_losses = ListSetting(str, ['H2O', 'NH3'])


class AnnotationConfig(ConfigGroup, ToleranceContainer):
    """Spectrum annotation configuration."""

    def __init__(self, **kwargs):
        """
        Initialise the AnnotationConfig.

        Forwards all kwargs to super().__init__ and translates the fragment tolerance.
        """
        super().__init__(**kwargs)
        self.tolerance, self.tolerance_ppm = self.translate_ms_tol(self.fragment_tol)
        if any(c < 1 for c in self.charges):
            raise ValueError("Fragment charges must be positive!")

    """Tolerance for matching fragment m/z values."""
    fragment_tol = Setting(str, '0.5 da', valid_values=ToleranceContainer._re_ms_tol)

    """Fragment ion types to annotate"""
    ion_types = ListSetting(str, ['b', 'y'], valid_values=('a', 'b', 'c', 'x', 'y', 'z'))

    """Fragment charges to annotate"""
    charges = ListSetting(int, [1])

    """Annotate immonium ions"""
    immonium = Setting(bool, False)

    """Annotate reporter ions"""
    reporter = Setting(bool, True)

    """Annotate precursor ions"""
    precursor = Setting(bool, True)

    """Annotate ions carrying neutral losses"""
    neutral_losses = Setting(bool, True)

    """Only consider a loss on fragments that contain a residue able to throw it"""
    restrict_losses = Setting(bool, True)

    """Ignore peaks below this fraction of the most intense peak"""
    intensity_limit = Setting(float, 0.0)

    """Mass shift applied to all ions"""
    mass_shift = Setting(float, 0.0)

    """Mass shift applied to N-terminal ions (a, b, c)"""
    mass_shift_nterm = Setting(float, 0.0)

    """Mass shift applied to C-terminal ions (x, y, z)"""
    mass_shift_cterm = Setting(float, 0.0)


class Config(ConfigGroup):
    """Top level configuration."""

    """
    Max number of threads to use for batch annotation. Setting to 0 means using the
    ThreadPoolExecutor default. Setting it to a negative number N means use all but N cpus.
    """
    threads = Setting(int, 0)

    """Modifications added on top of the default catalogue"""
    modifications = ListSetting(Modification, [])

    """Start the modification registry with the default catalogue"""
    include_default_modifications = Setting(bool, True)

    """Additional neutral losses available by name"""
    neutral_losses = ListSetting(NeutralLoss, [])

    """Fragmentation config"""
    fragmentation = Setting(FragmentationConfig, FragmentationConfig())

    """Annotation config"""
    annotation = Setting(AnnotationConfig, AnnotationConfig())


class ConfigReader:
    """Config Reader class."""

    @classmethod
    def load_file(cls, file_name):
        """Open a file by filename and create a Config from it."""
        with open(file_name) as f:
            if file_name.lower().endswith('.json'):
                return cls.load_json(f)
            elif file_name.lower().endswith('.yaml') or file_name.lower().endswith('.yml'):
                return cls.load_yaml(f)
            else:
                # YAML is a superset of JSON
                return cls.load_yaml(f)

    @classmethod
    def load_json(cls, file_obj):
        """Create a Config from a JSON file."""
        return Config(**json.load(file_obj))

    @classmethod
    def load_yaml(cls, file_obj):
        """Create a Config from a YAML file."""
        return Config(**yaml.safe_load(file_obj))

    @classmethod
    def loads_json(cls, s):
        """Create a Config from a JSON string."""
        return Config(**json.loads(s))

    @classmethod
    def loads_yaml(cls, s):
        """Create a Config from a YAML string."""
        return Config(**yaml.safe_load(s))

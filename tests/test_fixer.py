"""
Tests for the fix-pass orchestrator, including end-to-end scenarios.
"""

import gc
import threading
from unittest.mock import MagicMock

import pytest

from import_fixer.exceptions import EmptyBufferError, ToolNotFoundError
from import_fixer.fixer import ImportFixer, preserve_cursor
from import_fixer.models import SourceBuffer

from conftest import FakeDiagnostics, IdentitySorter


def make_fixer(config, unused=None, undefined=None, sorter=None):
    diagnostics = FakeDiagnostics(unused=unused, undefined=undefined)
    return ImportFixer(config, diagnostics=diagnostics, sorter=sorter or IdentitySorter()), diagnostics


class TestScenarios:
    """End-to-end fix-pass scenarios with an identity sorter."""
    
    def test_unused_simple_import_removed(self, test_config):
        """Test 'import os' goes and 'import sys' stays."""
        fixer, _ = make_fixer(test_config, unused=["os"])
        buffer = SourceBuffer(text="import os\nimport sys\nprint(sys.path)")
        
        report = fixer.fix_imports(buffer)
        
        assert buffer.text == "import sys\nprint(sys.path)"
        assert report.removed == ["os"]
    
    def test_unused_name_removed_from_from_import(self, test_config):
        """Test one name is removed from a multi-name from-import."""
        fixer, _ = make_fixer(test_config, unused=["collections.defaultdict"])
        buffer = SourceBuffer(text="from collections import OrderedDict, defaultdict\nx = OrderedDict()")
        
        fixer.fix_imports(buffer)
        
        assert buffer.text.splitlines()[0] == "from collections import OrderedDict"
    
    def test_empty_buffer(self, test_config):
        """Test an empty buffer fails before any analysis and stays unchanged."""
        fixer, diagnostics = make_fixer(test_config)
        sorter = fixer.sorter
        buffer = SourceBuffer(text="")
        
        with pytest.raises(EmptyBufferError):
            fixer.fix_imports(buffer)
        
        assert buffer.text == ""
        assert diagnostics.unused_queries == []
        assert sorter.calls == []
    
    def test_alias_inserted_at_head(self, test_config):
        """Test an undefined 'np' becomes 'import numpy as np' above the first import."""
        fixer, _ = make_fixer(test_config, undefined=["np"])
        buffer = SourceBuffer(text="import os\n\nx = np.zeros(os.cpu_count())\n")
        
        report = fixer.fix_imports(buffer)
        
        assert buffer.text == "import numpy as np\nimport os\n\nx = np.zeros(os.cpu_count())\n"
        assert report.inserted == ["import numpy as np"]
    
    def test_multi_module_line_lost(self, test_config):
        """Test known limitation: removing 'os' deletes 'import os, sys' entirely."""
        fixer, _ = make_fixer(test_config, unused=["os"])
        buffer = SourceBuffer(text="import os, sys\nprint(sys.argv)\n")
        
        fixer.fix_imports(buffer)
        
        assert buffer.text == "print(sys.argv)\n"


class TestFixPass:
    """Test step ordering and state handling of the full pass."""
    
    def test_undefined_query_sees_post_removal_buffer(self, test_config):
        """Test each step analyzes the buffer as it is when the step starts."""
        fixer, diagnostics = make_fixer(test_config, unused=["os"])
        buffer = SourceBuffer(text="import os\nimport sys\nsys.exit()\n")
        
        fixer.fix_imports(buffer)
        
        assert diagnostics.unused_queries == ["import os\nimport sys\nsys.exit()\n"]
        assert diagnostics.undefined_queries == ["import sys\nsys.exit()\n"]
    
    def test_repeated_undefined_names_are_deduplicated(self, test_config):
        """Test one insertion per report, then duplicates are dropped."""
        fixer, _ = make_fixer(test_config, undefined=["np", "np", "pd"])
        buffer = SourceBuffer(text="import os\nnp.a(pd, np, os)\n")
        
        report = fixer.fix_imports(buffer)
        
        assert buffer.text == "import pandas as pd\nimport numpy as np\nimport os\nnp.a(pd, np, os)\n"
        assert report.duplicates_removed == 1
    
    def test_sorter_output_replaces_buffer(self, test_config):
        """Test the buffer ends with the sorter's text."""
        sorter = MagicMock()
        sorter.sort.return_value = "import a\nimport b\n"
        fixer, _ = make_fixer(test_config, sorter=sorter)
        buffer = SourceBuffer(text="import b\nimport a\n")
        
        report = fixer.fix_imports(buffer)
        
        assert buffer.text == "import a\nimport b\n"
        assert report.sorted_changed is True
        assert report.changed is True
    
    def test_cursor_restored(self, test_config, sample_buffer):
        """Test the cursor offset is put back after a pass."""
        fixer, _ = make_fixer(test_config, unused=["os"])
        saved = sample_buffer.cursor
        
        fixer.fix_imports(sample_buffer)
        
        assert sample_buffer.cursor == saved
    
    def test_cursor_restored_and_edits_kept_on_error(self, test_config, sample_buffer):
        """Test a failing sorter leaves earlier edits in place and restores the cursor."""
        sorter = MagicMock()
        sorter.sort.side_effect = ToolNotFoundError("sorter executable not found")
        fixer, _ = make_fixer(test_config, unused=["os"], sorter=sorter)
        saved = sample_buffer.cursor
        
        with pytest.raises(ToolNotFoundError):
            fixer.fix_imports(sample_buffer)
        
        assert "import os\n" not in sample_buffer.text
        assert sample_buffer.cursor == saved
    
    def test_cursor_clamped_when_text_shrinks(self):
        """Test a saved offset past the new end is clamped."""
        buffer = SourceBuffer(text="import os\nx = 1\n", cursor=15)
        with preserve_cursor(buffer):
            buffer.replace_text("x = 1\n")
        assert buffer.cursor == len("x = 1\n")
    
    def test_no_change_report(self, test_config):
        """Test a clean file produces an empty report."""
        fixer, _ = make_fixer(test_config)
        buffer = SourceBuffer(text="import os\nos.getcwd()\n")
        
        report = fixer.fix_imports(buffer)
        
        assert report.changed is False
        assert buffer.text == "import os\nos.getcwd()\n"
    
    def test_same_buffer_shares_lock(self, test_config):
        """Test passes on one buffer use one lock and different buffers do not."""
        fixer, _ = make_fixer(test_config)
        first, second = SourceBuffer(text="x"), SourceBuffer(text="x")
        
        assert fixer._lock_for(first) is fixer._lock_for(first)
        assert fixer._lock_for(first) is not fixer._lock_for(second)
    
    def test_lock_released_with_buffer(self, test_config):
        """Test a buffer's lock entry goes away once the buffer is gone."""
        fixer, _ = make_fixer(test_config)
        buffer = SourceBuffer(text="import os\nos.getcwd()\n")
        fixer.fix_imports(buffer)
        assert len(fixer._locks) == 1
        
        del buffer
        gc.collect()
        
        assert len(fixer._locks) == 0
    
    def test_concurrent_passes_serialize(self, test_config):
        """Test two threads fixing one buffer both complete with a consistent result."""
        fixer, _ = make_fixer(test_config, unused=["os"], undefined=["np"])
        buffer = SourceBuffer(text="import os\nimport sys\nnp.array(sys.argv)\n")
        errors = []
        
        def run():
            try:
                fixer.fix_imports(buffer)
            except Exception as e:  # pragma: no cover
                errors.append(e)
        
        threads = [threading.Thread(target=run) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        
        assert errors == []
        assert buffer.text.count("import numpy as np") == 1
        assert "import sys" in buffer.text


class TestLineEndings:
    """Fix-passes over CRLF text keep CRLF on every line."""
    
    def test_removal_keeps_crlf(self, test_config):
        """Test a rebuilt from-import keeps the file's CRLF ending."""
        fixer, _ = make_fixer(test_config, unused=["collections.defaultdict"])
        buffer = SourceBuffer(text="from collections import OrderedDict, defaultdict\r\nx = OrderedDict()\r\n")
        
        fixer.fix_imports(buffer)
        
        assert buffer.text == "from collections import OrderedDict\r\nx = OrderedDict()\r\n"
    
    def test_inserted_import_uses_crlf(self, test_config):
        """Test an inserted import line ends with CRLF like its neighbours."""
        fixer, _ = make_fixer(test_config, undefined=["np"])
        buffer = SourceBuffer(text="import os\r\nx = np.zeros(os.cpu_count())\r\n")
        
        fixer.fix_imports(buffer)
        
        assert buffer.text == "import numpy as np\r\nimport os\r\nx = np.zeros(os.cpu_count())\r\n"
    
    def test_emptied_from_import_is_deleted(self, test_config):
        """Test removing the only name deletes a CRLF from-import line."""
        fixer, _ = make_fixer(test_config, unused=["x.y"])
        buffer = SourceBuffer(text="from x import y\r\nprint(1)\r\n")
        
        fixer.fix_imports(buffer)
        
        assert buffer.text == "print(1)\r\n"


class TestIndividualCommands:
    """Test the single-step commands."""
    
    def test_remove_unused_checks_empty_buffer(self, test_config):
        """Test only the unused-import path rejects empty buffers."""
        fixer, _ = make_fixer(test_config)
        
        with pytest.raises(EmptyBufferError):
            fixer.remove_unused_imports(SourceBuffer(text=""))
        assert fixer.insert_missing_imports(SourceBuffer(text="")) == []
        assert fixer.remove_duplicate_imports(SourceBuffer(text="")) == 0
    
    def test_sort_imports_reports_change(self, test_config):
        """Test sort_imports returns False for an unchanged buffer."""
        fixer, _ = make_fixer(test_config)
        assert fixer.sort_imports(SourceBuffer(text="import os\n")) is False
    
    def test_check_returns_all_findings(self, test_config):
        """Test check reports both kinds without editing."""
        fixer, _ = make_fixer(test_config, unused=["os"], undefined=["np"])
        buffer = SourceBuffer(text="import os\nnp\n")
        
        findings = fixer.check(buffer)
        
        assert [(f.code, f.value) for f in findings] == [("F401", "os"), ("F821", "np")]
        assert buffer.text == "import os\nnp\n"
    
    def test_check_empty_buffer(self, test_config):
        """Test checking an empty buffer finds nothing."""
        fixer, diagnostics = make_fixer(test_config, unused=["os"])
        assert fixer.check(SourceBuffer(text="")) == []
        assert diagnostics.unused_queries == []


class TestSaveHook:
    """Test fix-on-save behaviour."""
    
    def test_disabled_by_default(self, test_config):
        """Test on_save does nothing while the toggle is off."""
        fixer, diagnostics = make_fixer(test_config, unused=["os"])
        buffer = SourceBuffer(text="import os\n")
        
        assert fixer.on_save(buffer) is None
        assert buffer.text == "import os\n"
        assert diagnostics.unused_queries == []
    
    def test_toggle_enables_fix_on_save(self, test_config):
        """Test toggling flips the flag and on_save then fixes the buffer."""
        fixer, _ = make_fixer(test_config, unused=["os"])
        buffer = SourceBuffer(text="import os\nimport sys\nsys\n")
        
        assert fixer.toggle_fix_on_save() is True
        report = fixer.on_save(buffer)
        
        assert report.removed == ["os"]
        assert buffer.text == "import sys\nsys\n"
        assert fixer.toggle_fix_on_save() is False

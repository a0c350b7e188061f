"""Admin log viewer HTML page."""

LOG_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Admin Logs</title>
<style>
  * { margin: 0; padding: 0; box-sizing: border-box; }
  body { font-family: 'SF Mono', 'Consolas', 'Monaco', monospace; background: #0d1117; color: #c9d1d9; font-size: 13px; }
  .header { background: #161b22; border-bottom: 1px solid #30363d; padding: 12px 20px; display: flex; align-items: center; gap: 16px; flex-wrap: wrap; position: sticky; top: 0; z-index: 10; }
  .header h1 { font-size: 16px; color: #58a6ff; white-space: nowrap; }
  .controls { display: flex; gap: 8px; align-items: center; flex-wrap: wrap; }
  .controls select, .controls input, .controls button {
    background: #21262d; border: 1px solid #30363d; color: #c9d1d9; padding: 5px 10px;
    border-radius: 6px; font-size: 12px; font-family: inherit;
  }
  .controls input { width: 200px; }
  .controls button { cursor: pointer; }
  .controls button:disabled { opacity: 0.4; cursor: default; }
  .btn-danger { color: #f85149 !important; border-color: #f85149 !important; }
  .btn-primary { color: #58a6ff !important; border-color: #58a6ff !important; }
  .stats { color: #8b949e; font-size: 12px; margin-left: auto; white-space: nowrap; }
  .log-entry { padding: 2px 20px; line-height: 1.6; white-space: pre-wrap; word-break: break-all; }
  .log-entry:hover { background: #161b22; }
  .ts { color: #8b949e; }
  .lvl-debug { color: #8b949e; }
  .lvl-info { color: #3fb950; }
  .lvl-warn { color: #d29922; }
  .lvl-error { color: #f85149; font-weight: bold; }
  .extra { color: #d2a8ff; padding-left: 24px; display: block; }
  .empty { text-align: center; padding: 60px; color: #484f58; }
  .auto-label { color: #8b949e; font-size: 12px; display: flex; align-items: center; gap: 4px; }
  .auto-label input { width: auto; }
  details.error-details { padding-left: 24px; }
  details.error-details summary { cursor: pointer; color: #f85149; }
  details.error-details pre { color: #8b949e; padding: 4px 0 4px 16px; }
</style>
</head>
<body>

<div class="header">
  <h1>Application Logs</h1>
  <div class="controls">
    <input type="password" id="token" placeholder="Admin token" />
    <select id="level">
      <option value="">All levels</option>
      <option value="debug">debug</option>
      <option value="info">info</option>
      <option value="warn">warn</option>
      <option value="error">error</option>
    </select>
    <input type="text" id="search" placeholder="Search message or context..." maxlength="200" />
    <button onclick="goToPage(1)" class="btn-primary">Search</button>
    <button id="prev" onclick="goToPage(page - 1)">Prev</button>
    <button id="next" onclick="goToPage(page + 1)">Next</button>
    <button onclick="clearLogs()" class="btn-danger">Clear</button>
  </div>
  <label class="auto-label">
    <input type="checkbox" id="autoRefresh"> Auto (5s)
  </label>
  <div class="stats" id="stats"></div>
</div>

<div id="logs"><div class="empty">Loading...</div></div>

<script>
const LIMIT = 50;
const REFRESH_MS = 5000;
let page = 1;
let timer = null;

const tokenInput = document.getElementById('token');
tokenInput.value = localStorage.getItem('adminToken') || '';
tokenInput.addEventListener('change', () => localStorage.setItem('adminToken', tokenInput.value));

function authHeaders() {
  return { 'Authorization': 'Bearer ' + tokenInput.value };
}

function escapeHtml(s) {
  const d = document.createElement('div');
  d.textContent = s;
  return d.innerHTML;
}

function renderEntry(log) {
  let html = `<div class="log-entry"><span class="ts">${log.timestamp}</span> <span class="lvl-${log.level}">${log.level.toUpperCase().padEnd(5)}</span> ${escapeHtml(log.message)}`;
  if (log.context) html += `<span class="extra">context ${escapeHtml(JSON.stringify(log.context))}</span>`;
  if (log.meta) html += `<span class="extra">meta ${escapeHtml(JSON.stringify(log.meta))}</span>`;
  if (log.error) {
    const summary = escapeHtml(log.error.name + ': ' + log.error.message);
    html += log.error.stack
      ? `<details class="error-details"><summary>${summary}</summary><pre>${escapeHtml(log.error.stack)}</pre></details>`
      : `<span class="extra lvl-error">${summary}</span>`;
  }
  return html + '</div>';
}

async function goToPage(target) {
  page = Math.max(1, target);
  const params = new URLSearchParams({ page: String(page), limit: String(LIMIT) });
  const level = document.getElementById('level').value;
  const search = document.getElementById('search').value.trim();
  if (level) params.set('level', level);
  if (search) params.set('search', search);

  const container = document.getElementById('logs');
  try {
    const resp = await fetch('/api/v1/admin/logs?' + params.toString(), { headers: authHeaders() });
    const body = await resp.json();
    if (!body.success) {
      container.innerHTML = `<div class="empty">${escapeHtml(body.error.message)}</div>`;
      return;
    }

    const meta = body.meta;
    document.getElementById('stats').textContent = `page ${meta.page} / ${Math.max(meta.totalPages, 1)} · ${meta.total} entries`;
    document.getElementById('prev').disabled = meta.page <= 1;
    document.getElementById('next').disabled = meta.page >= meta.totalPages;

    container.innerHTML = body.data.length
      ? body.data.map(renderEntry).join('')
      : '<div class="empty">No logs found</div>';
  } catch (e) {
    container.innerHTML = '<div class="empty">Failed to fetch logs: ' + escapeHtml(e.message) + '</div>';
  }
}

async function clearLogs() {
  if (!confirm('Clear all logs?')) return;
  await fetch('/api/v1/admin/logs/clear', { method: 'POST', headers: authHeaders() });
  goToPage(1);
}

// Refreshes the current page; stays on it so paging is not reset
function setupAutoRefresh() {
  if (timer) clearInterval(timer);
  timer = null;
  if (document.getElementById('autoRefresh').checked) {
    timer = setInterval(() => goToPage(page), REFRESH_MS);
  }
}

document.getElementById('search').addEventListener('keydown', (e) => { if (e.key === 'Enter') goToPage(1); });

document.getElementById('autoRefresh').addEventListener('change', setupAutoRefresh);

goToPage(1);
setupAutoRefresh();
</script>

</body>
</html>"""

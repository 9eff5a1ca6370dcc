html_dashboard = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>SSE vs WebSocket</title>
    <style>
        body { font-family: sans-serif; margin: 2em; }
        .columns { display: flex; gap: 2em; }
        .column { flex: 1; border: 1px solid #ccc; padding: 1em; }
        dt { font-weight: bold; }
        #log { height: 12em; overflow-y: auto; font-family: monospace; font-size: 0.8em; }
    </style>
</head>
<body>
    <h1>SSE vs WebSocket</h1>
    <div class="columns">
        <div class="column" data-protocol="sse">
            <h2>SSE</h2>
            <button id="sse-toggle">Connect</button>
            <dl>
                <dt>Status</dt><dd class="status">disconnected</dd>
                <dt>Messages</dt><dd class="count">0</dd>
                <dt>Last value</dt><dd class="value">-</dd>
                <dt>Latency (ms)</dt><dd class="latency">-</dd>
            </dl>
        </div>
        <div class="column" data-protocol="websocket">
            <h2>WebSocket</h2>
            <button id="websocket-toggle">Connect</button>
            <dl>
                <dt>Status</dt><dd class="status">disconnected</dd>
                <dt>Messages</dt><dd class="count">0</dd>
                <dt>Last value</dt><dd class="value">-</dd>
                <dt>Latency (ms)</dt><dd class="latency">-</dd>
            </dl>
        </div>
    </div>
    <h2>Broadcast</h2>
    <input id="message" placeholder="message">
    <select id="protocol">
        <option value="all">all</option>
        <option value="sse">sse</option>
        <option value="websocket">websocket</option>
    </select>
    <button id="send">Send</button>
    <h2>Server</h2>
    <pre id="stats"></pre>
    <div id="log"></div>
    <script>
        const panels = {
            sse: document.querySelector('[data-protocol="sse"]'),
            websocket: document.querySelector('[data-protocol="websocket"]'),
        };
        const counts = {sse: 0, websocket: 0};
        let evtSource = null;
        let socket = null;

        function log(text) {
            const line = document.createElement('div');
            line.innerText = new Date().toISOString() + ' ' + text;
            document.getElementById('log').prepend(line);
        }

        function setStatus(protocol, status) {
            panels[protocol].querySelector('.status').innerText = status;
            document.getElementById(protocol + '-toggle').innerText =
                status === 'connected' ? 'Disconnect' : 'Connect';
        }

        function handle(protocol, data) {
            if (data.type === 'sensor-data') {
                counts[protocol] += 1;
                panels[protocol].querySelector('.count').innerText = counts[protocol];
                panels[protocol].querySelector('.value').innerText = data.value.toFixed(2);
                panels[protocol].querySelector('.latency').innerText = Date.now() - data.serverTime;
            } else {
                log(protocol + ' ' + data.type + ': ' + JSON.stringify(data));
            }
        }

        document.getElementById('sse-toggle').onclick = function () {
            if (evtSource) {
                evtSource.close();
                evtSource = null;
                setStatus('sse', 'disconnected');
                return;
            }
            evtSource = new EventSource('/sse');
            evtSource.onopen = () => setStatus('sse', 'connected');
            evtSource.onerror = () => setStatus('sse', 'reconnecting');
            evtSource.onmessage = (e) => handle('sse', JSON.parse(e.data));
        };

        document.getElementById('websocket-toggle').onclick = function () {
            if (socket) {
                socket.close();
                socket = null;
                setStatus('websocket', 'disconnected');
                return;
            }
            const scheme = location.protocol === 'https:' ? 'wss://' : 'ws://';
            socket = new WebSocket(scheme + location.host + '/');
            socket.onopen = () => setStatus('websocket', 'connected');
            socket.onclose = () => { socket = null; setStatus('websocket', 'disconnected'); };
            socket.onmessage = (e) => handle('websocket', JSON.parse(e.data));
        };

        document.getElementById('send').onclick = function () {
            fetch('/api/broadcast', {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify({
                    message: document.getElementById('message').value,
                    protocol: document.getElementById('protocol').value,
                }),
            });
        };

        async function refreshStats() {
            try {
                const response = await fetch('/api/stats');
                document.getElementById('stats').innerText =
                    JSON.stringify(await response.json(), null, 2);
            } catch (error) {
                log('stats unavailable: ' + error);
            }
        }
        setInterval(refreshStats, 2000);
        refreshStats();
    </script>
</body>
</html>
"""
